"""Transfer submission interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass
class SubmissionRequest:
    """One per-asset transfer of an approved mint."""

    mint_id: str
    asset_id: str
    symbol: str
    contract_address: str
    beneficiary: str
    amount: Decimal  # Human units
    raw_amount: int  # amount * 10**decimals
    decimals: int
    chain_id: Optional[str] = None
    network_id: Optional[int] = None  # Numeric chain id (1 for Ethereum)


class SubmissionClient(ABC):
    """Submits transfers and returns their transaction hash."""

    @abstractmethod
    async def submit(self, request: SubmissionRequest) -> str:
        """Submit one transfer.

        Returns:
            Transaction hash

        Raises:
            SubmissionError: If the transfer was not accepted
        """
        raise NotImplementedError()

    @property
    @abstractmethod
    def name(self) -> str:
        """Client name."""
        raise NotImplementedError()
