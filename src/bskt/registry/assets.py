"""Asset registries.

AssetRegistry holds assets living at a single contract address.
MultiChainAssetRegistry holds assets deployed on several chains and keeps
`chains` non-empty with `default_chain` always one of its keys.
"""

import logging
from collections import Counter
from typing import Optional

from bskt.backup import SnapshotBackup
from bskt.contracts.assets import AssetCreate, ChainDeployment, MultiChainAssetCreate
from bskt.errors import ConflictError, NotFoundError, ValidationError
from bskt.registry.base import Registry
from bskt.registry.chains import ChainRegistry
from bskt.registry.database import Database
from bskt.registry.models import Asset, AssetType, MultiChainAsset, utcnow

logger = logging.getLogger(__name__)


def count_by_type(assets) -> dict[str, int]:
    """Number of assets per asset type."""
    return dict(Counter(AssetType(asset.type).value for asset in assets))


class AssetRegistry(Registry):
    """Single-chain assets. Immutable after registration."""

    model = Asset
    snapshot_name = "assets"
    kind = "Asset"

    async def register(self, data: AssetCreate) -> Asset:
        """Register a new asset.

        Raises:
            ConflictError: If the asset id is already registered
        """
        async with self._lock, self.db.session() as session:
            if await self._get(session, data.id) is not None:
                raise ConflictError(f"Asset {data.id} already exists")

            now = utcnow()
            asset = Asset(
                id=data.id,
                type=data.type.value,
                name=data.name,
                symbol=data.symbol,
                decimals=data.decimals,
                contract_address=data.contract_address,
                extra=data.metadata,
                created_at=now,
                updated_at=now,
            )
            session.add(asset)
            await self._commit_and_snapshot(session)

        logger.info(f"Registered asset: {asset.id} ({asset.symbol}, {asset.type})")
        return asset

    async def list_by_type(self, asset_type: AssetType) -> list[Asset]:
        async with self.db.session() as session:
            return await self._all(session, Asset.type == AssetType(asset_type).value)


class MultiChainAssetRegistry(Registry):
    """Assets deployed on one or more registered chains."""

    model = MultiChainAsset
    snapshot_name = "multichain-assets"
    kind = "Asset"

    def __init__(
        self,
        db: Database,
        chains: ChainRegistry,
        backup: Optional[SnapshotBackup] = None,
    ):
        super().__init__(db, backup)
        self.chains = chains

    async def _check_chain(self, chain_id: str, field: str) -> None:
        if not await self.chains.exists(chain_id):
            raise ValidationError(f"Chain {chain_id} is not registered", field=field)

    async def register(self, data: MultiChainAssetCreate) -> MultiChainAsset:
        """Register an asset with its per-chain deployments.

        Raises:
            ConflictError: If the asset id is already registered
            ValidationError: If `chains` is empty, lacks `default_chain`,
                or names a chain that is not registered
        """
        if not data.chains:
            raise ValidationError("At least one chain deployment is required", field="chains")
        if data.default_chain not in data.chains:
            raise ValidationError(
                f"Default chain {data.default_chain} must be one of the deployed chains",
                field="default_chain",
            )
        for chain_id in data.chains:
            await self._check_chain(chain_id, "chains")

        async with self._lock, self.db.session() as session:
            if await self._get(session, data.id) is not None:
                raise ConflictError(f"Asset {data.id} already exists")

            now = utcnow()
            asset = MultiChainAsset(
                id=data.id,
                type=data.type.value,
                name=data.name,
                symbol=data.symbol,
                decimals=data.decimals,
                chains={
                    chain_id: deployment.model_dump()
                    for chain_id, deployment in data.chains.items()
                },
                default_chain=data.default_chain,
                extra=data.metadata,
                created_at=now,
                updated_at=now,
            )
            session.add(asset)
            await self._commit_and_snapshot(session)

        logger.info(
            f"Registered multi-chain asset: {asset.id} ({asset.symbol}) "
            f"on {', '.join(sorted(asset.chains))}"
        )
        return asset

    async def add_chain(
        self, asset_id: str, chain_id: str, deployment: ChainDeployment
    ) -> MultiChainAsset:
        """Deploy an existing asset on another chain.

        Raises:
            NotFoundError: If the asset does not exist
            ValidationError: If the chain is not registered
            ConflictError: If the asset is already deployed on the chain
        """
        await self._check_chain(chain_id, "chain_id")

        async with self._lock, self.db.session() as session:
            asset = await self._require(session, asset_id)
            if chain_id in asset.chains:
                raise ConflictError(f"Asset {asset_id} is already deployed on {chain_id}")

            # JSON columns are only flushed when reassigned
            chains = dict(asset.chains)
            chains[chain_id] = ChainDeployment.model_validate(deployment).model_dump(
                include={"contract_address", "decimals", "metadata"}
            )
            asset.chains = chains
            asset.updated_at = utcnow()
            await self._commit_and_snapshot(session)

        logger.info(f"Added chain {chain_id} to asset {asset_id}")
        return asset

    async def remove_chain(self, asset_id: str, chain_id: str) -> MultiChainAsset:
        """Remove a chain deployment.

        Removing the default chain moves the default to the smallest
        remaining chain id.

        Raises:
            NotFoundError: If the asset does not exist or is not on the chain
            ConflictError: If the chain is the last one
        """
        async with self._lock, self.db.session() as session:
            asset = await self._require(session, asset_id)
            if chain_id not in asset.chains:
                raise NotFoundError("Deployment", f"{asset_id} on {chain_id}")
            if len(asset.chains) == 1:
                raise ConflictError(f"Cannot remove the last chain of asset {asset_id}")

            chains = {key: value for key, value in asset.chains.items() if key != chain_id}
            asset.chains = chains
            if asset.default_chain == chain_id:
                asset.default_chain = min(chains)
                logger.info(f"Default chain of asset {asset_id} moved to {asset.default_chain}")
            asset.updated_at = utcnow()
            await self._commit_and_snapshot(session)

        logger.info(f"Removed chain {chain_id} from asset {asset_id}")
        return asset

    async def get_on_chain(self, asset_id: str, chain_id: str) -> Optional[dict]:
        """Deployment descriptor of an asset on a chain, or None."""
        asset = await self.get(asset_id)
        if asset is None or chain_id not in asset.chains:
            return None
        return dict(asset.chains[chain_id])

    async def list_by_chain(self, chain_id: str) -> list[MultiChainAsset]:
        """Assets deployed on a chain (full scan)."""
        return [asset for asset in await self.list() if chain_id in asset.chains]

    async def list_by_type(self, asset_type: AssetType) -> list[MultiChainAsset]:
        async with self.db.session() as session:
            return await self._all(
                session, MultiChainAsset.type == AssetType(asset_type).value
            )
