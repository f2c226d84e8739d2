"""Dry-run POR client (configured reserve, always fresh)."""

from decimal import Decimal

from bskt.por.base import PORClient, ReserveAttestation
from bskt.registry.models import utcnow


class DryRunPORClient(PORClient):
    """Reports a fixed reserve verified at the moment of the call."""

    def __init__(self, reserve_balance: Decimal = Decimal("1000000000")):
        self.reserve_balance = Decimal(reserve_balance)

    @property
    def name(self) -> str:
        return "dryrun"

    async def fetch_attestation(self) -> ReserveAttestation:
        return ReserveAttestation(
            reserve_balance=self.reserve_balance,
            last_verified=utcnow(),
            verified=True,
            source=self.name,
        )
