"""Proof of Reserve client interface and the eligibility check."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from bskt.errors import POREligibilityError
from bskt.registry.models import utcnow

logger = logging.getLogger(__name__)


@dataclass
class ReserveAttestation:
    """Reserve balance reported by the oracle and when it was verified."""

    reserve_balance: Decimal
    last_verified: datetime
    verified: bool = True
    source: Optional[str] = None

    def age_seconds(self, now: Optional[datetime] = None) -> float:
        return ((now or utcnow()) - self.last_verified).total_seconds()


class PORClient(ABC):
    """Read-only source of reserve attestations."""

    @abstractmethod
    async def fetch_attestation(self) -> ReserveAttestation:
        """Fetch the latest attestation.

        Raises:
            POREligibilityError: With reason `oracle_unavailable` when the
                oracle cannot be reached or answers garbage
        """
        raise NotImplementedError()

    @property
    @abstractmethod
    def name(self) -> str:
        """Client name."""
        raise NotImplementedError()


def check_reserve(
    attestation: ReserveAttestation,
    requested: Decimal,
    max_age_seconds: int,
    now: Optional[datetime] = None,
) -> None:
    """Reject a mint the attestation does not back.

    An attestation exactly `max_age_seconds` old is still fresh.

    Raises:
        POREligibilityError: Naming the failed condition
    """
    if not attestation.verified:
        raise POREligibilityError(
            POREligibilityError.UNVERIFIED, "Reserve attestation is not verified"
        )

    if not attestation.reserve_balance.is_finite():
        raise POREligibilityError(
            POREligibilityError.UNAVAILABLE,
            f"Reserve attestation carries no usable balance: {attestation.reserve_balance}",
        )

    age = attestation.age_seconds(now)
    if age > max_age_seconds:
        raise POREligibilityError(
            POREligibilityError.STALE,
            f"Reserve attestation is stale ({age:.0f}s old, max {max_age_seconds}s)",
        )

    if attestation.reserve_balance < requested:
        raise POREligibilityError(
            POREligibilityError.INSUFFICIENT_RESERVE,
            f"Insufficient reserve: {attestation.reserve_balance} available, {requested} requested",
        )

    logger.debug(
        f"POR check passed: reserve {attestation.reserve_balance} >= {requested}, age {age:.0f}s"
    )
