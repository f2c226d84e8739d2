"""Pytest configuration and fixtures."""

from datetime import timedelta
from decimal import Decimal
from typing import Optional

import pytest
from httpx import ASGITransport, AsyncClient

from bskt.api.app import create_app
from bskt.config import Settings
from bskt.contracts.assets import AssetCreate, ChainDeployment, MultiChainAssetCreate
from bskt.contracts.baskets import (
    BasketAssetEntry,
    BasketCreate,
    ChainBasketAssetEntry,
    MultiChainBasketCreate,
)
from bskt.contracts.chains import ChainCreate, NativeCurrency
from bskt.errors import POREligibilityError
from bskt.por.base import PORClient, ReserveAttestation
from bskt.registry.models import AssetType, ChainName, utcnow
from bskt.services.container import build_services
from bskt.submission.dryrun import DryRunSubmissionClient

ALICE = "0x" + "a" * 40
BOB = "0x" + "b" * 40
USDC_ADDRESS = "0x" + "1" * 40
GOLD_ADDRESS = "0x" + "2" * 40


class FakePORClient(PORClient):
    """POR client whose attestation the test controls."""

    def __init__(self, reserve_balance: Decimal = Decimal("1000000")):
        self.reserve_balance = reserve_balance
        self.age = timedelta(0)
        self.verified = True
        self.unavailable = False
        self.calls = 0

    @property
    def name(self) -> str:
        return "fake"

    async def fetch_attestation(self) -> ReserveAttestation:
        self.calls += 1
        if self.unavailable:
            raise POREligibilityError(POREligibilityError.UNAVAILABLE, "POR oracle unavailable")
        return ReserveAttestation(
            reserve_balance=self.reserve_balance,
            last_verified=utcnow() - self.age,
            verified=self.verified,
        )


def chain_create(
    chain_key: str,
    name: ChainName = ChainName.ETHEREUM,
    chain_id: int = 1,
    is_testnet: bool = False,
) -> ChainCreate:
    return ChainCreate(
        id=chain_key,
        name=name,
        display_name=chain_key.replace("-", " ").title(),
        chain_id=chain_id,
        rpc_url=f"https://rpc.example.com/{chain_key}",
        explorer_url=f"https://explorer.example.com/{chain_key}",
        native_currency=NativeCurrency(name="Ether", symbol="ETH", decimals=18),
        is_testnet=is_testnet,
    )


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings isolated from the environment, database in tmp_path."""
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'bskt.db'}",
        backup_dir=tmp_path / "backups",
        valid_api_keys="",
        environment="test",
        debug=False,
        por_max_age_seconds=3600,
        submission_timeout_seconds=1.0,
        mint_lock_timeout=1.0,
        default_decimals=6,
    )


@pytest.fixture
def por() -> FakePORClient:
    return FakePORClient()


@pytest.fixture
def submitter() -> DryRunSubmissionClient:
    return DryRunSubmissionClient()


@pytest.fixture
async def services(settings, por, submitter):
    """Started service graph."""
    services = build_services(settings, por=por, submitter=submitter)
    await services.start()
    yield services
    await services.stop()


@pytest.fixture
async def chains(services):
    """ethereum-mainnet and polygon-mainnet registered."""
    await services.chains.register(chain_create("ethereum-mainnet"))
    await services.chains.register(
        chain_create("polygon-mainnet", name=ChainName.POLYGON, chain_id=137)
    )
    return services.chains


@pytest.fixture
async def basket(services):
    """Basket `b1`: 60% USDC (6 decimals), 40% GOLD (no decimals declared)."""
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
    return await services.baskets.create(
        BasketCreate(
            id="b1",
            name="Stable Gold",
            symbol="SGLD",
            assets=[
                BasketAssetEntry(asset_id="usdc", weight=60, proportion="60%"),
                BasketAssetEntry(asset_id="gold", weight=40, proportion="40%"),
            ],
        )
    )


@pytest.fixture
async def multichain_basket(services, chains):
    """Basket `mb1` on ethereum (default) and polygon, 50/50 of MUSD and MGOLD.

    MUSD has 6 decimals on ethereum and 18 on polygon; MGOLD only declares
    8 decimals at the asset level.
    """
    await services.multichain_assets.register(
        MultiChainAssetCreate(
            id="musd",
            type=AssetType.MONETARY,
            name="Multi USD",
            symbol="MUSD",
            chains={
                "ethereum-mainnet": ChainDeployment(contract_address=USDC_ADDRESS, decimals=6),
                "polygon-mainnet": ChainDeployment(contract_address=USDC_ADDRESS, decimals=18),
            },
            default_chain="ethereum-mainnet",
        )
    )
    await services.multichain_assets.register(
        MultiChainAssetCreate(
            id="mgold",
            type=AssetType.PHYSICAL_BACKED,
            name="Multi Gold",
            symbol="MGLD",
            decimals=8,
            chains={
                "ethereum-mainnet": ChainDeployment(contract_address=GOLD_ADDRESS),
                "polygon-mainnet": ChainDeployment(contract_address=GOLD_ADDRESS),
            },
            default_chain="ethereum-mainnet",
        )
    )
    return await services.multichain_baskets.create(
        MultiChainBasketCreate(
            id="mb1",
            name="Cross Stable Gold",
            symbol="XSG",
            assets=[
                ChainBasketAssetEntry(asset_id="musd", weight=50),
                ChainBasketAssetEntry(asset_id="mgold", weight=50),
            ],
            supported_chains=["ethereum-mainnet", "polygon-mainnet"],
            default_chain="ethereum-mainnet",
        )
    )


@pytest.fixture
def api_keys() -> Optional[str]:
    """Override to enable API key checks in a test module."""
    return None


@pytest.fixture
async def client(services, api_keys):
    """Async test client bound to the started services."""
    if api_keys is not None:
        services.settings.valid_api_keys = api_keys
    app = create_app(services)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
