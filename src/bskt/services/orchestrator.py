"""Mint orchestration.

A mint moves through REQUESTED -> EXPANDED -> POR_CHECKED -> SUBMITTING
and ends COMPLETED or FAILED:

1. Expand the basket into per-asset amounts (nothing is recorded if this fails)
2. Persist a pending mint record under the record's advisory lock
3. Check the Proof of Reserve attestation
4. Submit each asset in basket order, stopping at the first failure
5. Record the terminal status with the transaction hashes obtained

The ledger's insert already rejects a reused record id. The advisory lock
covers the rest of the mint: a client retrying the same transaction id
waits for the first attempt's POR check and submissions to finish, then
gets ConflictError, instead of racing it. Any error after step 2 leaves
the record failed, never pending.
"""

import asyncio
import logging
import secrets
from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal, localcontext
from enum import Enum
from typing import Optional

from bskt.config import Settings
from bskt.contracts.mints import MintRequest, MultiChainMintRequest
from bskt.errors import POREligibilityError, SubmissionError, ValidationError
from bskt.por.base import PORClient, check_reserve
from bskt.registry.assets import AssetRegistry, MultiChainAssetRegistry
from bskt.registry.baskets import BasketRegistry, MultiChainBasketRegistry
from bskt.registry.chains import ChainRegistry
from bskt.registry.mints import MintStateService, MultiChainMintStateService, mint_record_id
from bskt.registry.models import (
    AssetType,
    BasketStatus,
    MintRecord,
    MintStatus,
    MultiChainMintRecord,
    utcnow,
)
from bskt.submission.base import SubmissionClient, SubmissionRequest
from bskt.utils.locks import KeyedLocks

logger = logging.getLogger(__name__)


class MintPhase(str, Enum):
    """Phases of a mint."""

    REQUESTED = "requested"
    EXPANDED = "expanded"
    POR_CHECKED = "por_checked"
    SUBMITTING = "submitting"
    COMPLETED = "completed"
    FAILED = "failed"


def generate_transaction_id() -> str:
    """BSKT + UTC date + 8 upper-case hex digits."""
    return f"BSKT{utcnow():%Y%m%d}{secrets.token_hex(4).upper()}"


def to_raw_amount(amount: Decimal, decimals: int) -> int:
    """Scale a human amount to integer base units, rounding half-even."""
    with localcontext() as ctx:
        ctx.prec = 80
        scaled = Decimal(amount).scaleb(decimals)
        return int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_EVEN))


@dataclass
class PlannedTransfer:
    """One asset of an expanded mint, ready for submission."""

    asset_id: str
    symbol: str
    type: str
    amount: Decimal
    contract_address: str
    decimals: int
    chain_id: Optional[str] = None
    chain_name: Optional[str] = None
    network_id: Optional[int] = None
    explorer_url: Optional[str] = None

    def entry(self, tx_hash: Optional[str] = None) -> dict:
        """Mint record entry for this transfer."""
        data = {
            "asset_id": self.asset_id,
            "symbol": self.symbol,
            "type": self.type,
            "amount": str(self.amount),
            "contract_address": self.contract_address,
            "tx_hash": tx_hash,
        }
        if self.chain_id is not None:
            data["chain_id"] = self.chain_id
            data["chain_name"] = self.chain_name
            data["explorer_url"] = (
                f"{self.explorer_url.rstrip('/')}/tx/{tx_hash}"
                if tx_hash and self.explorer_url
                else None
            )
        return data


class MintOrchestrator:
    """Coordinates expansion, the POR gate, submission and the mint ledgers.

    Holds no state of its own besides the per-record locks.
    """

    def __init__(
        self,
        settings: Settings,
        chains: ChainRegistry,
        assets: AssetRegistry,
        baskets: BasketRegistry,
        mints: MintStateService,
        multichain_assets: MultiChainAssetRegistry,
        multichain_baskets: MultiChainBasketRegistry,
        multichain_mints: MultiChainMintStateService,
        por: PORClient,
        submitter: SubmissionClient,
        locks: Optional[KeyedLocks] = None,
    ):
        self.settings = settings
        self.chains = chains
        self.assets = assets
        self.baskets = baskets
        self.mints = mints
        self.multichain_assets = multichain_assets
        self.multichain_baskets = multichain_baskets
        self.multichain_mints = multichain_mints
        self.por = por
        self.submitter = submitter
        self.locks = locks or KeyedLocks(default_timeout=settings.mint_lock_timeout)

    def _phase(self, ref: str, phase: MintPhase, detail: str = "") -> None:
        message = f"Mint {ref}: {phase.value}" + (f" ({detail})" if detail else "")
        if phase is MintPhase.FAILED:
            logger.warning(message)
        else:
            logger.info(message)

    @staticmethod
    def _check_active(basket) -> None:
        status = BasketStatus(basket.status)
        if status is not BasketStatus.ACTIVE:
            raise ValidationError(f"Basket {basket.id} is {status.value}", field="basket_id")

    @staticmethod
    def _check_plan(plan: list, asset_type: Optional[AssetType]) -> list:
        if asset_type is not None:
            plan = [t for t in plan if t.type == AssetType(asset_type).value]
        if not plan:
            raise ValidationError("No basket asset matches the asset type filter", field="asset_type_filter")
        return plan

    async def mint(self, request: MintRequest) -> MintRecord:
        """Mint a single-chain basket.

        Raises:
            NotFoundError: Unknown basket
            ValidationError: Inactive basket or nothing left after filtering
            ConflictError: Transaction id already used
            POREligibilityError: Reserve check failed (record marked failed)
            SubmissionError: A transfer failed or timed out (record marked failed)
            LockTimeoutError: The record is busy
        """
        transaction_id = request.transaction_id or generate_transaction_id()
        amount = Decimal(request.amount)
        self._phase(transaction_id, MintPhase.REQUESTED, f"{amount} of {request.basket_id}")

        basket = await self.baskets.require(request.basket_id)
        self._check_active(basket)
        plan = [
            PlannedTransfer(
                asset_id=asset.id,
                symbol=asset.symbol,
                type=AssetType(asset.type).value,
                amount=share,
                contract_address=asset.contract_address,
                decimals=(
                    asset.decimals if asset.decimals is not None else self.settings.default_decimals
                ),
            )
            for asset, share in await self.baskets.expand(basket.id, amount)
        ]
        plan = self._check_plan(plan, request.asset_type_filter)
        self._phase(transaction_id, MintPhase.EXPANDED, f"{len(plan)} assets")

        record_id = mint_record_id(transaction_id)
        async with self.locks.hold(record_id, timeout=self.settings.mint_lock_timeout):
            await self.mints.create_record(
                basket_id=basket.id,
                transaction_id=transaction_id,
                beneficiary=request.beneficiary,
                amount=amount,
                assets=[t.entry() for t in plan],
            )
            return await self._run(self.mints, record_id, amount, request.beneficiary, plan)

    async def mint_multichain(self, request: MultiChainMintRequest) -> MultiChainMintRecord:
        """Mint a multi-chain basket on one chain.

        The target chain defaults to the basket's default chain. Assets pinned
        to another supported chain are transferred on their pinned chain.

        Raises:
            NotFoundError: Unknown basket or chain
            ValidationError: Inactive basket, unsupported chain, an asset not
                deployed on its chain, or nothing left after filtering
            ConflictError: Transaction id already used on the chain
            POREligibilityError: Reserve check failed (record marked failed)
            SubmissionError: A transfer failed or timed out (record marked failed)
            LockTimeoutError: The record is busy
        """
        transaction_id = request.transaction_id or generate_transaction_id()
        amount = Decimal(request.amount)
        self._phase(transaction_id, MintPhase.REQUESTED, f"{amount} of {request.basket_id}")

        basket = await self.multichain_baskets.require(request.basket_id)
        self._check_active(basket)
        chain_id = request.chain_id or basket.default_chain
        if chain_id not in basket.supported_chains:
            raise ValidationError(
                f"Basket {basket.id} does not support chain {chain_id}", field="chain_id"
            )
        chain = await self.chains.require(chain_id)

        chain_cache = {chain.id: chain}
        plan = []
        for asset, share, pinned in await self.multichain_baskets.expand(basket.id, amount):
            target_id = pinned or chain_id
            if target_id not in chain_cache:
                chain_cache[target_id] = await self.chains.require(target_id)
            target = chain_cache[target_id]

            deployment = asset.chains.get(target_id)
            if deployment is None:
                raise ValidationError(
                    f"Asset {asset.id} is not deployed on {target_id}", field="chain_id"
                )
            decimals = asset.decimals_on(target_id)
            plan.append(
                PlannedTransfer(
                    asset_id=asset.id,
                    symbol=asset.symbol,
                    type=AssetType(asset.type).value,
                    amount=share,
                    contract_address=deployment["contract_address"],
                    decimals=decimals if decimals is not None else self.settings.default_decimals,
                    chain_id=target.id,
                    chain_name=target.display_name,
                    network_id=target.chain_id,
                    explorer_url=target.explorer_url,
                )
            )
        plan = self._check_plan(plan, request.asset_type_filter)
        self._phase(transaction_id, MintPhase.EXPANDED, f"{len(plan)} assets on {chain_id}")

        record_id = mint_record_id(transaction_id, chain_id)
        async with self.locks.hold(record_id, timeout=self.settings.mint_lock_timeout):
            await self.multichain_mints.create_record(
                basket_id=basket.id,
                transaction_id=transaction_id,
                beneficiary=request.beneficiary,
                amount=amount,
                assets=[t.entry() for t in plan],
                chain_id=chain.id,
                chain_name=chain.display_name,
            )
            return await self._run(
                self.multichain_mints, record_id, amount, request.beneficiary, plan
            )

    async def _run(self, ledger, record_id: str, amount: Decimal, beneficiary: str, plan: list):
        """Drive a pending record to a terminal status.

        Unexpected errors also mark the record failed, keeping the hashes
        obtained so far, before they propagate.
        """
        tx_hashes: list[str] = []
        try:
            return await self._execute(ledger, record_id, amount, beneficiary, plan, tx_hashes)
        except (POREligibilityError, SubmissionError):
            raise
        except Exception as e:
            logger.exception(f"Mint {record_id}: unexpected error")
            self._phase(record_id, MintPhase.FAILED, type(e).__name__)
            await ledger.update_record(
                record_id,
                MintStatus.FAILED,
                assets=self._entries(plan, tx_hashes),
                error=f"Internal error: {type(e).__name__}: {e}",
            )
            raise

    async def _execute(
        self,
        ledger,
        record_id: str,
        amount: Decimal,
        beneficiary: str,
        plan: list,
        tx_hashes: list,
    ):
        """POR gate, then sequential submission, then the terminal update."""
        try:
            attestation = await self.por.fetch_attestation()
            check_reserve(attestation, amount, self.settings.por_max_age_seconds)
        except POREligibilityError as e:
            e.mint_id = record_id
            self._phase(record_id, MintPhase.FAILED, e.reason)
            await ledger.update_record(record_id, MintStatus.FAILED, error=f"{e.reason}: {e.message}")
            raise
        self._phase(record_id, MintPhase.POR_CHECKED, f"reserve {attestation.reserve_balance}")

        self._phase(record_id, MintPhase.SUBMITTING)
        for transfer in plan:
            try:
                tx_hashes.append(await self._submit(record_id, beneficiary, transfer))
            except SubmissionError as e:
                e.mint_id = record_id
                e.asset_id = e.asset_id or transfer.asset_id
                logger.error(f"Mint {record_id}: submission failed for {e.asset_id}: {e.message}")
                self._phase(record_id, MintPhase.FAILED, f"asset {e.asset_id}")
                await ledger.update_record(
                    record_id,
                    MintStatus.FAILED,
                    assets=self._entries(plan, tx_hashes),
                    error=f"Submission failed for {e.asset_id}: {e.message}",
                )
                raise

        record = await ledger.update_record(
            record_id, MintStatus.COMPLETED, assets=self._entries(plan, tx_hashes)
        )
        self._phase(record_id, MintPhase.COMPLETED, f"{len(tx_hashes)} transfers")
        return record

    async def _submit(self, record_id: str, beneficiary: str, transfer: PlannedTransfer) -> str:
        """Submit one transfer; any failure surfaces as SubmissionError naming the asset."""
        timeout = self.settings.submission_timeout_seconds
        try:
            request = SubmissionRequest(
                mint_id=record_id,
                asset_id=transfer.asset_id,
                symbol=transfer.symbol,
                contract_address=transfer.contract_address,
                beneficiary=beneficiary,
                amount=transfer.amount,
                raw_amount=to_raw_amount(transfer.amount, transfer.decimals),
                decimals=transfer.decimals,
                chain_id=transfer.chain_id,
                network_id=transfer.network_id,
            )
            return await asyncio.wait_for(self.submitter.submit(request), timeout=timeout)
        except asyncio.TimeoutError:
            raise SubmissionError(
                f"Submission timed out after {timeout}s", asset_id=transfer.asset_id
            )
        except SubmissionError:
            raise
        except Exception as e:
            raise SubmissionError(
                f"Submission client error: {type(e).__name__}: {e}", asset_id=transfer.asset_id
            ) from e

    @staticmethod
    def _entries(plan: list, tx_hashes: list) -> list[dict]:
        """Record entries; assets past the last hash keep tx_hash None."""
        return [
            transfer.entry(tx_hashes[i] if i < len(tx_hashes) else None)
            for i, transfer in enumerate(plan)
        ]
