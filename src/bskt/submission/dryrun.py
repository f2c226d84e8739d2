"""Dry-run submission client (no real transactions)."""

import asyncio
import hashlib
import logging
from typing import Iterable, Optional

from bskt.errors import SubmissionError
from bskt.submission.base import SubmissionClient, SubmissionRequest

logger = logging.getLogger(__name__)


class DryRunSubmissionClient(SubmissionClient):
    """Returns deterministic fake transaction hashes.

    Args:
        fail_on: Asset ids whose submission raises SubmissionError
        delay: Seconds to wait before answering
    """

    def __init__(self, fail_on: Optional[Iterable[str]] = None, delay: float = 0.0):
        self.fail_on = set(fail_on or ())
        self.delay = delay
        self.submitted: list[SubmissionRequest] = []

    @property
    def name(self) -> str:
        return "dryrun"

    async def submit(self, request: SubmissionRequest) -> str:
        if self.delay:
            await asyncio.sleep(self.delay)

        if request.asset_id in self.fail_on:
            raise SubmissionError(
                f"Simulated failure for {request.asset_id}", asset_id=request.asset_id
            )

        seed = (
            f"{request.mint_id}:{request.chain_id or ''}:{request.asset_id}:"
            f"{request.raw_amount}:{request.beneficiary}"
        )
        tx_hash = "0x" + hashlib.sha256(seed.encode()).hexdigest()
        self.submitted.append(request)
        logger.debug(f"[DRY RUN] {request.symbol} {request.amount} -> {request.beneficiary}: {tx_hash}")
        return tx_hash
