"""Mint ledgers: pending -> completed | failed records plus aggregates.

Records are created pending before anything is submitted and transition
exactly once to a terminal status. Aggregated amounts only count completed
records and are summed as Decimal.
"""

import logging
from collections import Counter
from decimal import Decimal
from typing import Any, Optional

from bskt.errors import ConflictError, ValidationError
from bskt.registry.base import Registry
from bskt.registry.models import MintRecord, MintStatus, MultiChainMintRecord, utcnow

logger = logging.getLogger(__name__)


def mint_record_id(transaction_id: str, chain_id: Optional[str] = None) -> str:
    """Record id for a transaction (and chain, for multi-chain mints)."""
    if chain_id is None:
        return f"mint-{transaction_id}"
    return f"mint-{chain_id}-{transaction_id}"


def status_counts(records) -> dict[str, int]:
    counts = Counter(MintStatus(record.status) for record in records)
    return {
        "total": len(records),
        "completed": counts[MintStatus.COMPLETED],
        "failed": counts[MintStatus.FAILED],
        "pending": counts[MintStatus.PENDING],
    }


def _completed(records) -> list:
    return [r for r in records if r.status == MintStatus.COMPLETED.value]


def _total(records) -> Decimal:
    return sum((Decimal(r.amount) for r in records), Decimal(0))


class _MintLedger(Registry):
    """Operations shared by both ledgers."""

    kind = "Mint record"

    async def _insert(self, record) -> Any:
        async with self._lock, self.db.session() as session:
            if await self._get(session, record.id) is not None:
                raise ConflictError(f"Transaction {record.transaction_id} already exists")
            session.add(record)
            await self._commit_and_snapshot(session)

        logger.info(f"Created mint record: {record.id} (pending, {record.amount} of {record.basket_id})")
        return record

    async def update_record(
        self,
        record_id: str,
        status: MintStatus,
        assets: Optional[list[dict]] = None,
        error: Optional[str] = None,
    ):
        """Move a pending record to a terminal status.

        Raises:
            NotFoundError: If the record does not exist
            ValidationError: If `status` is not terminal
            ConflictError: If the record is already completed or failed
        """
        status = MintStatus(status)
        if not status.is_terminal:
            raise ValidationError(f"Cannot move a record to {status.value}", field="status")

        async with self._lock, self.db.session() as session:
            record = await self._require(session, record_id)
            current = MintStatus(record.status)
            if current.is_terminal:
                raise ConflictError(f"Mint record {record_id} is already {current.value}")

            record.status = status.value
            if assets is not None:
                record.assets = [dict(entry) for entry in assets]
            record.error = error
            record.completed_at = utcnow()
            await self._commit_and_snapshot(session)

        logger.info(f"Updated mint record: {record_id}, status: {status.value}")
        return record

    async def by_basket(self, basket_id: str) -> list:
        async with self.db.session() as session:
            return await self._all(session, self.model.basket_id == basket_id)

    async def by_beneficiary(self, beneficiary: str) -> list:
        async with self.db.session() as session:
            return await self._all(session, self.model.beneficiary == beneficiary)

    async def by_transaction(self, transaction_id: str) -> list:
        async with self.db.session() as session:
            return await self._all(session, self.model.transaction_id == transaction_id)


class MintStateService(_MintLedger):
    """Ledger of single-chain mints."""

    model = MintRecord
    snapshot_name = "mints"

    async def create_record(
        self,
        basket_id: str,
        transaction_id: str,
        beneficiary: str,
        amount: Decimal,
        assets: list[dict],
    ) -> MintRecord:
        """Persist a pending record with id `mint-{transaction_id}`.

        Raises:
            ConflictError: If the transaction id was already used
        """
        record = MintRecord(
            id=mint_record_id(transaction_id),
            basket_id=basket_id,
            transaction_id=transaction_id,
            beneficiary=beneficiary,
            amount=Decimal(amount),
            assets=[dict(entry) for entry in assets],
            status=MintStatus.PENDING.value,
            created_at=utcnow(),
        )
        return await self._insert(record)

    async def total_minted_by_asset(self, asset_id: str) -> dict:
        """Completed totals for one asset across all baskets."""
        total = Decimal(0)
        count = 0
        symbol = asset_id
        for record in _completed(await self.list()):
            for entry in record.assets:
                if entry["asset_id"] == asset_id:
                    total += Decimal(entry["amount"])
                    count += 1
                    symbol = entry["symbol"]
        return {"asset_id": asset_id, "symbol": symbol, "total_amount": str(total), "count": count}

    async def basket_stats(self, basket_id: str) -> dict:
        records = await self.by_basket(basket_id)
        completed = _completed(records)

        asset_totals: dict[str, dict] = {}
        for record in completed:
            for entry in record.assets:
                totals = asset_totals.setdefault(
                    entry["asset_id"], {"symbol": entry["symbol"], "amount": Decimal(0)}
                )
                totals["amount"] += Decimal(entry["amount"])

        counts = status_counts(records)
        return {
            "total_mints": counts["total"],
            "completed": counts["completed"],
            "failed": counts["failed"],
            "pending": counts["pending"],
            "total_minted": str(_total(completed)),
            "asset_totals": {
                asset_id: {"symbol": t["symbol"], "amount": str(t["amount"])}
                for asset_id, t in asset_totals.items()
            },
        }

    async def summary(self) -> dict:
        return status_counts(await self.list())


class MultiChainMintStateService(_MintLedger):
    """Ledger of per-chain mints of multi-chain baskets."""

    model = MultiChainMintRecord
    snapshot_name = "multichain-mints"

    async def create_record(
        self,
        basket_id: str,
        transaction_id: str,
        beneficiary: str,
        amount: Decimal,
        assets: list[dict],
        chain_id: str,
        chain_name: str,
    ) -> MultiChainMintRecord:
        """Persist a pending record with id `mint-{chain_id}-{transaction_id}`.

        Raises:
            ConflictError: If the transaction id was already used on the chain
        """
        record = MultiChainMintRecord(
            id=mint_record_id(transaction_id, chain_id),
            basket_id=basket_id,
            chain_id=chain_id,
            chain_name=chain_name,
            transaction_id=transaction_id,
            beneficiary=beneficiary,
            amount=Decimal(amount),
            assets=[dict(entry) for entry in assets],
            status=MintStatus.PENDING.value,
            created_at=utcnow(),
        )
        return await self._insert(record)

    async def by_chain(self, chain_id: str) -> list[MultiChainMintRecord]:
        async with self.db.session() as session:
            return await self._all(session, MultiChainMintRecord.chain_id == chain_id)

    async def chain_stats(self, chain_id: str) -> dict:
        records = await self.by_chain(chain_id)
        stats = status_counts(records)
        stats["total_minted"] = str(_total(_completed(records)))
        return stats

    async def basket_cross_chain_stats(self, basket_id: str) -> dict:
        """Status counts for a basket and completed amounts per chain."""
        records = await self.by_basket(basket_id)
        completed = _completed(records)

        by_chain: dict[str, dict] = {}
        for record in completed:
            chain = by_chain.setdefault(record.chain_id, {"count": 0, "total_amount": Decimal(0)})
            chain["count"] += 1
            chain["total_amount"] += Decimal(record.amount)

        stats = status_counts(records)
        stats["total_minted"] = str(_total(completed))
        stats["chains_active"] = len(by_chain)
        stats["by_chain"] = {
            chain_id: {"count": c["count"], "total_amount": str(c["total_amount"])}
            for chain_id, c in by_chain.items()
        }
        return stats

    async def beneficiary_cross_chain_stats(self, beneficiary: str) -> dict:
        """What a beneficiary received, per chain and per asset."""
        records = await self.by_beneficiary(beneficiary)
        completed = _completed(records)

        by_chain: dict[str, dict] = {}
        asset_totals: dict[str, dict] = {}
        for record in completed:
            chain = by_chain.setdefault(
                record.chain_id, {"count": 0, "total_amount": Decimal(0), "assets": 0}
            )
            chain["count"] += 1
            chain["total_amount"] += Decimal(record.amount)
            chain["assets"] += len(record.assets)

            for entry in record.assets:
                totals = asset_totals.setdefault(
                    entry["asset_id"],
                    {"symbol": entry["symbol"], "total_amount": Decimal(0), "chains": set()},
                )
                totals["total_amount"] += Decimal(entry["amount"])
                totals["chains"].add(entry.get("chain_id", record.chain_id))

        return {
            "beneficiary": beneficiary,
            "total_mints": len(records),
            "completed_mints": len(completed),
            "by_chain": {
                chain_id: {
                    "count": c["count"],
                    "total_amount": str(c["total_amount"]),
                    "assets": c["assets"],
                }
                for chain_id, c in by_chain.items()
            },
            "asset_totals": [
                {
                    "asset_id": asset_id,
                    "symbol": t["symbol"],
                    "total_amount": str(t["total_amount"]),
                    "chains_active": sorted(t["chains"]),
                }
                for asset_id, t in asset_totals.items()
            ],
        }

    async def summary(self) -> dict:
        records = await self.list()
        stats = status_counts(records)
        stats["chains_active"] = len({record.chain_id for record in records})
        return stats
