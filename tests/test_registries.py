"""Tests for the chain and asset registries."""

import json

import pytest

from bskt.contracts.assets import (
    AddAssetChainRequest,
    AssetCreate,
    ChainDeployment,
    MultiChainAssetCreate,
)
from bskt.contracts.chains import ChainUpdate
from bskt.errors import ConflictError, NotFoundError, ValidationError
from bskt.registry.models import AssetType, ChainName, NetType

from conftest import GOLD_ADDRESS, USDC_ADDRESS, chain_create


def multichain_asset(asset_id: str, chains: list[str], default: str) -> MultiChainAssetCreate:
    return MultiChainAssetCreate(
        id=asset_id,
        type=AssetType.DIGITAL_ASSET,
        name=asset_id.upper(),
        symbol=asset_id.upper(),
        chains={c: ChainDeployment(contract_address=USDC_ADDRESS) for c in chains},
        default_chain=default,
    )


class TestChainRegistry:
    """Tests for chain registration and updates."""

    @pytest.mark.asyncio
    async def test_register_and_get(self, services):
        chain = await services.chains.register(chain_create("ethereum-mainnet"))

        assert chain.id == "ethereum-mainnet"
        assert chain.created_at == chain.updated_at

        stored = await services.chains.get("ethereum-mainnet")
        assert stored.chain_id == 1
        assert stored.native_currency["symbol"] == "ETH"
        assert await services.chains.exists("ethereum-mainnet")

    @pytest.mark.asyncio
    async def test_duplicate_register_keeps_original(self, services):
        await services.chains.register(chain_create("ethereum-mainnet", chain_id=1))

        with pytest.raises(ConflictError, match="already exists"):
            await services.chains.register(chain_create("ethereum-mainnet", chain_id=5))

        stored = await services.chains.require("ethereum-mainnet")
        assert stored.chain_id == 1

    @pytest.mark.asyncio
    async def test_require_missing_chain(self, services):
        assert await services.chains.get("nope") is None
        with pytest.raises(NotFoundError):
            await services.chains.require("nope")

    @pytest.mark.asyncio
    async def test_update_merges_fields(self, services):
        await services.chains.register(chain_create("ethereum-mainnet"))

        updated = await services.chains.update(
            "ethereum-mainnet", ChainUpdate(display_name="Ethereum", metadata={"tier": 1})
        )

        assert updated.display_name == "Ethereum"
        assert updated.extra == {"tier": 1}
        assert updated.rpc_url == "https://rpc.example.com/ethereum-mainnet"
        assert updated.updated_at >= updated.created_at

    @pytest.mark.asyncio
    async def test_update_missing_chain(self, services):
        with pytest.raises(NotFoundError):
            await services.chains.update("nope", ChainUpdate(display_name="x"))

    @pytest.mark.asyncio
    async def test_filters(self, services):
        await services.chains.register(chain_create("ethereum-mainnet"))
        await services.chains.register(
            chain_create("polygon-amoy", name=ChainName.POLYGON, chain_id=80002, is_testnet=True)
        )

        mainnets = await services.chains.list_by_net_type(NetType.MAINNET)
        testnets = await services.chains.list_by_net_type(NetType.TESTNET)

        assert [c.id for c in mainnets] == ["ethereum-mainnet"]
        assert [c.id for c in testnets] == ["polygon-amoy"]
        assert (await services.chains.get_by_name(ChainName.POLYGON)).id == "polygon-amoy"
        assert await services.chains.get_by_name(ChainName.BASE) is None
        assert len(await services.chains.list()) == 2

    @pytest.mark.asyncio
    async def test_mutation_writes_snapshot(self, services, settings):
        await services.chains.register(chain_create("ethereum-mainnet"))
        await services.backup.flush()

        snapshots = sorted(settings.backup_dir.glob("chains-*.json"))
        assert len(snapshots) == 1
        data = json.loads(snapshots[0].read_text())
        assert data["ethereum-mainnet"]["chain_id"] == 1


class TestAssetRegistry:
    """Tests for single-chain assets."""

    @pytest.mark.asyncio
    async def test_register_and_list_by_type(self, services):
        await services.assets.register(
            AssetCreate(
                id="usdc", type=AssetType.MONETARY, name="USD Coin", symbol="USDC",
                decimals=6, contract_address=USDC_ADDRESS,
            )
        )
        await services.assets.register(
            AssetCreate(
                id="gold", type=AssetType.PHYSICAL_BACKED, name="Gold", symbol="GLD",
                contract_address=GOLD_ADDRESS,
            )
        )

        monetary = await services.assets.list_by_type(AssetType.MONETARY)
        assert [a.id for a in monetary] == ["usdc"]
        assert (await services.assets.require("gold")).decimals is None

    @pytest.mark.asyncio
    async def test_duplicate_asset(self, services):
        asset = AssetCreate(
            id="usdc", type=AssetType.MONETARY, name="USD Coin", symbol="USDC",
            contract_address=USDC_ADDRESS,
        )
        await services.assets.register(asset)

        with pytest.raises(ConflictError):
            await services.assets.register(asset)

    def test_invalid_contract_address_rejected(self):
        with pytest.raises(ValueError):
            AssetCreate(
                id="bad", type=AssetType.MONETARY, name="Bad", symbol="BAD",
                contract_address="0x1234",
            )


class TestMultiChainAssetRegistry:
    """Tests for multi-chain assets and their chain set."""

    @pytest.mark.asyncio
    async def test_register_requires_default_in_chains(self, services, chains):
        with pytest.raises(ValidationError, match="default_chain"):
            await services.multichain_assets.register(
                multichain_asset("wbtc", ["ethereum-mainnet"], "polygon-mainnet")
            )

    @pytest.mark.asyncio
    async def test_register_requires_a_chain(self, services, chains):
        with pytest.raises(ValidationError, match="chains"):
            await services.multichain_assets.register(
                multichain_asset("wbtc", [], "ethereum-mainnet")
            )

    @pytest.mark.asyncio
    async def test_register_rejects_unknown_chain(self, services, chains):
        with pytest.raises(ValidationError, match="not registered"):
            await services.multichain_assets.register(
                multichain_asset("wbtc", ["ethereum-mainnet", "solana"], "ethereum-mainnet")
            )

    @pytest.mark.asyncio
    async def test_add_chain(self, services, chains):
        await services.multichain_assets.register(
            multichain_asset("wbtc", ["ethereum-mainnet"], "ethereum-mainnet")
        )

        asset = await services.multichain_assets.add_chain(
            "wbtc",
            "polygon-mainnet",
            AddAssetChainRequest(
                chain_id="polygon-mainnet", contract_address=GOLD_ADDRESS, decimals=8
            ),
        )

        assert set(asset.chains) == {"ethereum-mainnet", "polygon-mainnet"}
        deployment = await services.multichain_assets.get_on_chain("wbtc", "polygon-mainnet")
        assert deployment == {"contract_address": GOLD_ADDRESS, "decimals": 8, "metadata": None}
        assert [a.id for a in await services.multichain_assets.list_by_chain("polygon-mainnet")] == ["wbtc"]

    @pytest.mark.asyncio
    async def test_add_chain_errors(self, services, chains):
        await services.multichain_assets.register(
            multichain_asset("wbtc", ["ethereum-mainnet"], "ethereum-mainnet")
        )
        deployment = ChainDeployment(contract_address=USDC_ADDRESS)

        with pytest.raises(NotFoundError):
            await services.multichain_assets.add_chain("nope", "polygon-mainnet", deployment)
        with pytest.raises(ValidationError):
            await services.multichain_assets.add_chain("wbtc", "solana", deployment)
        with pytest.raises(ConflictError):
            await services.multichain_assets.add_chain("wbtc", "ethereum-mainnet", deployment)

    @pytest.mark.asyncio
    async def test_remove_last_chain_forbidden(self, services, chains):
        await services.multichain_assets.register(
            multichain_asset("wbtc", ["ethereum-mainnet"], "ethereum-mainnet")
        )

        with pytest.raises(ConflictError, match="last chain"):
            await services.multichain_assets.remove_chain("wbtc", "ethereum-mainnet")

        asset = await services.multichain_assets.require("wbtc")
        assert list(asset.chains) == ["ethereum-mainnet"]

    @pytest.mark.asyncio
    async def test_remove_default_chain_reassigns_smallest(self, services):
        for key in ("c-chain", "a-chain", "b-chain"):
            await services.chains.register(chain_create(key))
        await services.multichain_assets.register(
            multichain_asset("wbtc", ["c-chain", "b-chain", "a-chain"], "c-chain")
        )

        asset = await services.multichain_assets.remove_chain("wbtc", "c-chain")

        assert asset.default_chain == "a-chain"
        assert set(asset.chains) == {"a-chain", "b-chain"}

    @pytest.mark.asyncio
    async def test_remove_missing_deployment(self, services, chains):
        await services.multichain_assets.register(
            multichain_asset("wbtc", ["ethereum-mainnet"], "ethereum-mainnet")
        )

        with pytest.raises(NotFoundError):
            await services.multichain_assets.remove_chain("wbtc", "polygon-mainnet")
        assert await services.multichain_assets.get_on_chain("wbtc", "polygon-mainnet") is None
