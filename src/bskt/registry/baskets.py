"""Basket registries and proportional basket expansion."""

import logging
from decimal import Decimal, localcontext
from typing import Optional

from bskt.backup import SnapshotBackup
from bskt.contracts.baskets import BasketCreate, MultiChainBasketCreate
from bskt.errors import ConflictError, InvalidWeightsError, NotFoundError, ValidationError
from bskt.registry.assets import AssetRegistry, MultiChainAssetRegistry
from bskt.registry.base import Registry
from bskt.registry.chains import ChainRegistry
from bskt.registry.database import Database
from bskt.registry.models import Basket, MultiChainBasket, utcnow

logger = logging.getLogger(__name__)

WEIGHT_TOTAL = 100
# Minimum significant digits used for expansion arithmetic
EXPANSION_PRECISION = 28


def proportional_amount(total: Decimal, weight: int) -> Decimal:
    """Share of `total` for a weight in percent.

    The context grows with `total` so the share is exact: a weight of at
    most 100 adds three digits and dividing by 100 only moves the exponent.
    """
    total = Decimal(total)
    with localcontext() as ctx:
        ctx.prec = max(EXPANSION_PRECISION, len(total.as_tuple().digits) + 3)
        return total * weight / WEIGHT_TOTAL


def check_weights(entries) -> None:
    total = sum(entry.weight for entry in entries)
    if total != WEIGHT_TOTAL:
        raise InvalidWeightsError(total)


class BasketRegistry(Registry):
    """Single-chain baskets of weighted assets."""

    model = Basket
    snapshot_name = "baskets"
    kind = "Basket"

    def __init__(
        self,
        db: Database,
        assets: AssetRegistry,
        backup: Optional[SnapshotBackup] = None,
    ):
        super().__init__(db, backup)
        self.assets = assets

    async def _check_assets(self, entries) -> None:
        if not entries:
            raise ValidationError("At least one asset is required", field="assets")
        for entry in entries:
            if not await self.assets.exists(entry.asset_id):
                raise ValidationError(f"Asset {entry.asset_id} not found", field="assets")
        check_weights(entries)

    async def create(self, data: BasketCreate) -> Basket:
        """Create an active basket.

        Raises:
            ConflictError: If the basket id is already taken
            ValidationError: If an asset is unknown or weights do not sum to 100
        """
        async with self._lock, self.db.session() as session:
            if await self._get(session, data.id) is not None:
                raise ConflictError(f"Basket {data.id} already exists")
            await self._check_assets(data.assets)

            now = utcnow()
            basket = Basket(
                id=data.id,
                name=data.name,
                symbol=data.symbol,
                description=data.description,
                assets=[entry.model_dump() for entry in data.assets],
                created_at=now,
                updated_at=now,
            )
            session.add(basket)
            await self._commit_and_snapshot(session)

        logger.info(f"Created basket: {basket.id} ({basket.symbol}) with {len(basket.assets)} assets")
        return basket

    async def expand(self, basket_id: str, total_amount: Decimal) -> list[tuple]:
        """Distribute `total_amount` across the basket by weight.

        Returns:
            (asset, amount) pairs in basket order. For weights {60, 40} and
            1000 the amounts are exactly 600 and 400.

        Raises:
            NotFoundError: If the basket or one of its assets is missing
        """
        basket = await self.require(basket_id)
        expanded = []
        for entry in basket.assets:
            asset = await self.assets.require(entry["asset_id"])
            expanded.append((asset, proportional_amount(total_amount, entry["weight"])))
        return expanded


class MultiChainBasketRegistry(Registry):
    """Baskets of multi-chain assets with a set of supported chains."""

    model = MultiChainBasket
    snapshot_name = "multichain-baskets"
    kind = "Basket"

    def __init__(
        self,
        db: Database,
        assets: MultiChainAssetRegistry,
        chains: ChainRegistry,
        backup: Optional[SnapshotBackup] = None,
    ):
        super().__init__(db, backup)
        self.assets = assets
        self.chains = chains

    async def _check_chains(self, data: MultiChainBasketCreate) -> None:
        supported = data.supported_chains
        if not supported:
            raise ValidationError("At least one supported chain is required", field="supported_chains")
        if len(set(supported)) != len(supported):
            raise ValidationError("Duplicate chain ids", field="supported_chains")
        if data.default_chain not in supported:
            raise ValidationError(
                f"Default chain {data.default_chain} must be a supported chain",
                field="default_chain",
            )
        for chain_id in supported:
            if not await self.chains.exists(chain_id):
                raise ValidationError(f"Chain {chain_id} is not registered", field="supported_chains")
        for entry in data.assets:
            if entry.chain_id is not None and entry.chain_id not in supported:
                raise ValidationError(
                    f"Asset {entry.asset_id} is pinned to unsupported chain {entry.chain_id}",
                    field="assets",
                )

    async def create(self, data: MultiChainBasketCreate) -> MultiChainBasket:
        """Create an active multi-chain basket.

        Raises:
            ConflictError: If the basket id is already taken
            ValidationError: On unknown assets, bad weights or bad chain sets
        """
        async with self._lock, self.db.session() as session:
            if await self._get(session, data.id) is not None:
                raise ConflictError(f"Basket {data.id} already exists")
            if not data.assets:
                raise ValidationError("At least one asset is required", field="assets")
            for entry in data.assets:
                if not await self.assets.exists(entry.asset_id):
                    raise ValidationError(f"Asset {entry.asset_id} not found", field="assets")
            check_weights(data.assets)
            await self._check_chains(data)

            now = utcnow()
            basket = MultiChainBasket(
                id=data.id,
                name=data.name,
                symbol=data.symbol,
                description=data.description,
                assets=[entry.model_dump() for entry in data.assets],
                supported_chains=list(data.supported_chains),
                default_chain=data.default_chain,
                created_at=now,
                updated_at=now,
            )
            session.add(basket)
            await self._commit_and_snapshot(session)

        logger.info(
            f"Created multi-chain basket: {basket.id} ({basket.symbol}) "
            f"on {', '.join(basket.supported_chains)}"
        )
        return basket

    async def expand(self, basket_id: str, total_amount: Decimal) -> list[tuple]:
        """Distribute `total_amount` across the basket by weight.

        Returns:
            (asset, amount, pinned_chain_id) triples in basket order.
        """
        basket = await self.require(basket_id)
        expanded = []
        for entry in basket.assets:
            asset = await self.assets.require(entry["asset_id"])
            amount = proportional_amount(total_amount, entry["weight"])
            expanded.append((asset, amount, entry.get("chain_id")))
        return expanded

    async def add_chain_to_basket(self, basket_id: str, chain_id: str) -> MultiChainBasket:
        """Add a supported chain.

        Raises:
            NotFoundError: If the basket does not exist
            ValidationError: If the chain is not registered
            ConflictError: If the chain is already supported
        """
        if not await self.chains.exists(chain_id):
            raise ValidationError(f"Chain {chain_id} is not registered", field="chain_id")

        async with self._lock, self.db.session() as session:
            basket = await self._require(session, basket_id)
            if chain_id in basket.supported_chains:
                raise ConflictError(f"Basket {basket_id} already supports {chain_id}")

            basket.supported_chains = [*basket.supported_chains, chain_id]
            basket.updated_at = utcnow()
            await self._commit_and_snapshot(session)

        logger.info(f"Added chain {chain_id} to basket {basket_id}")
        return basket

    async def remove_chain_from_basket(self, basket_id: str, chain_id: str) -> MultiChainBasket:
        """Drop a supported chain.

        Raises:
            NotFoundError: If the basket does not exist or does not support the chain
            ConflictError: If the chain is the last one, or assets are pinned to it
        """
        async with self._lock, self.db.session() as session:
            basket = await self._require(session, basket_id)
            if chain_id not in basket.supported_chains:
                raise NotFoundError("Chain", f"{chain_id} in basket {basket_id}")
            if len(basket.supported_chains) == 1:
                raise ConflictError(f"Cannot remove the last chain of basket {basket_id}")
            pinned = [e["asset_id"] for e in basket.assets if e.get("chain_id") == chain_id]
            if pinned:
                raise ConflictError(
                    f"Assets pinned to {chain_id} in basket {basket_id}: {', '.join(pinned)}"
                )

            remaining = [c for c in basket.supported_chains if c != chain_id]
            basket.supported_chains = remaining
            if basket.default_chain == chain_id:
                basket.default_chain = min(remaining)
                logger.info(f"Default chain of basket {basket_id} moved to {basket.default_chain}")
            basket.updated_at = utcnow()
            await self._commit_and_snapshot(session)

        logger.info(f"Removed chain {chain_id} from basket {basket_id}")
        return basket

    async def list_by_chain(self, chain_id: str) -> list[MultiChainBasket]:
        """Baskets supporting a chain (full scan)."""
        return [basket for basket in await self.list() if chain_id in basket.supported_chains]
