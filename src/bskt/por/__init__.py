"""Proof of Reserve clients."""

from bskt.por.base import PORClient, ReserveAttestation, check_reserve
from bskt.por.factory import create_por_client

__all__ = ["PORClient", "ReserveAttestation", "check_reserve", "create_por_client"]
