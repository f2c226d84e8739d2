"""SQLAlchemy models for the chain, asset, basket and mint registries."""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from sqlalchemy import JSON, BigInteger, DateTime, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class UTCDateTime(TypeDecorator):
    """Stores naive UTC, hands back aware UTC (SQLite drops tzinfo)."""

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


class DecimalString(TypeDecorator):
    """Exact decimal amounts stored as text."""

    impl = String
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(Decimal(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(value)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class AssetType(str, Enum):
    """Kind of asset held in a basket."""

    MONETARY = "monetary"
    DIGITAL_ASSET = "digital-asset"
    NFT = "nft"
    PHYSICAL_BACKED = "physical-backed"
    CUSTOM = "custom"


class ChainName(str, Enum):
    """Symbolic network name of a chain."""

    ETHEREUM = "ethereum"
    POLYGON = "polygon"
    ARBITRUM = "arbitrum"
    OPTIMISM = "optimism"
    BASE = "base"
    AVALANCHE = "avalanche"
    CUSTOM = "custom"


class NetType(str, Enum):
    """Mainnet / testnet filter."""

    MAINNET = "mainnet"
    TESTNET = "testnet"


class BasketStatus(str, Enum):
    """Status of a basket."""

    ACTIVE = "active"
    PAUSED = "paused"
    DEPRECATED = "deprecated"


class MintStatus(str, Enum):
    """Status of a mint record."""

    PENDING = "pending"      # Accepted, nothing submitted yet
    COMPLETED = "completed"  # Every asset returned a tx hash
    FAILED = "failed"        # POR rejection or a submission failure

    @property
    def is_terminal(self) -> bool:
        return self is not MintStatus.PENDING


class Chain(Base):
    """Registered blockchain network descriptor."""

    __tablename__ = "chains"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    name: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    display_name: Mapped[str] = mapped_column(String(255), nullable=False)
    chain_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    rpc_url: Mapped[str] = mapped_column(String(500), nullable=False)
    explorer_url: Mapped[str] = mapped_column(String(500), nullable=False)
    native_currency: Mapped[dict] = mapped_column(JSON, nullable=False)
    is_testnet: Mapped[bool] = mapped_column(default=False)
    extra: Mapped[Optional[dict]] = mapped_column("metadata", JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "display_name": self.display_name,
            "chain_id": self.chain_id,
            "rpc_url": self.rpc_url,
            "explorer_url": self.explorer_url,
            "native_currency": dict(self.native_currency),
            "is_testnet": self.is_testnet,
            "metadata": self.extra,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class Asset(Base):
    """Asset deployed at a single contract address."""

    __tablename__ = "assets"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    type: Mapped[AssetType] = mapped_column(String(20), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    symbol: Mapped[str] = mapped_column(String(20), nullable=False)
    decimals: Mapped[Optional[int]] = mapped_column(nullable=True)
    contract_address: Mapped[str] = mapped_column(String(42), nullable=False)
    extra: Mapped[Optional[dict]] = mapped_column("metadata", JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": AssetType(self.type).value,
            "name": self.name,
            "symbol": self.symbol,
            "decimals": self.decimals,
            "contract_address": self.contract_address,
            "metadata": self.extra,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class MultiChainAsset(Base):
    """Asset deployed on one or more chains.

    `chains` maps chain id -> {"contract_address", "decimals", "metadata"}
    and always contains `default_chain`.
    """

    __tablename__ = "multichain_assets"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    type: Mapped[AssetType] = mapped_column(String(20), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    symbol: Mapped[str] = mapped_column(String(20), nullable=False)
    decimals: Mapped[Optional[int]] = mapped_column(nullable=True)
    chains: Mapped[dict] = mapped_column(JSON, nullable=False)
    default_chain: Mapped[str] = mapped_column(String(100), nullable=False)
    extra: Mapped[Optional[dict]] = mapped_column("metadata", JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow)

    def decimals_on(self, chain_id: str) -> Optional[int]:
        """Decimals on a chain, falling back to the asset-level value."""
        deployment = self.chains.get(chain_id) or {}
        if deployment.get("decimals") is not None:
            return deployment["decimals"]
        return self.decimals

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": AssetType(self.type).value,
            "name": self.name,
            "symbol": self.symbol,
            "decimals": self.decimals,
            "chains": {chain_id: dict(info) for chain_id, info in self.chains.items()},
            "default_chain": self.default_chain,
            "metadata": self.extra,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class Basket(Base):
    """Weighted collection of single-chain assets.

    `assets` is a list of {"asset_id", "weight", "proportion"}.
    """

    __tablename__ = "baskets"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    symbol: Mapped[str] = mapped_column(String(20), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[BasketStatus] = mapped_column(
        String(20), default=BasketStatus.ACTIVE, nullable=False
    )
    assets: Mapped[list] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "symbol": self.symbol,
            "description": self.description,
            "status": BasketStatus(self.status).value,
            "assets": [dict(entry) for entry in self.assets],
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class MultiChainBasket(Base):
    """Weighted collection of multi-chain assets.

    Entries may pin an asset to one chain with "chain_id".
    """

    __tablename__ = "multichain_baskets"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    symbol: Mapped[str] = mapped_column(String(20), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[BasketStatus] = mapped_column(
        String(20), default=BasketStatus.ACTIVE, nullable=False
    )
    assets: Mapped[list] = mapped_column(JSON, nullable=False)
    supported_chains: Mapped[list] = mapped_column(JSON, nullable=False)
    default_chain: Mapped[str] = mapped_column(String(100), nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "symbol": self.symbol,
            "description": self.description,
            "status": BasketStatus(self.status).value,
            "assets": [dict(entry) for entry in self.assets],
            "supported_chains": list(self.supported_chains),
            "default_chain": self.default_chain,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class MintRecord(Base):
    """Outcome of a single-chain mint request."""

    __tablename__ = "mints"

    id: Mapped[str] = mapped_column(String(200), primary_key=True)
    basket_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    transaction_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    beneficiary: Mapped[str] = mapped_column(String(42), nullable=False, index=True)
    amount: Mapped[Decimal] = mapped_column(DecimalString(78), nullable=False)
    assets: Mapped[list] = mapped_column(JSON, nullable=False)
    status: Mapped[MintStatus] = mapped_column(
        String(20), default=MintStatus.PENDING, nullable=False
    )
    error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow)
    completed_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "basket_id": self.basket_id,
            "transaction_id": self.transaction_id,
            "beneficiary": self.beneficiary,
            "amount": str(self.amount),
            "assets": [dict(entry) for entry in self.assets],
            "status": MintStatus(self.status).value,
            "error": self.error,
            "created_at": _iso(self.created_at),
            "completed_at": _iso(self.completed_at),
        }


class MultiChainMintRecord(Base):
    """Outcome of a mint on a specific chain."""

    __tablename__ = "multichain_mints"

    id: Mapped[str] = mapped_column(String(300), primary_key=True)
    basket_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    chain_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    chain_name: Mapped[str] = mapped_column(String(255), nullable=False)
    transaction_id: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    beneficiary: Mapped[str] = mapped_column(String(42), nullable=False, index=True)
    amount: Mapped[Decimal] = mapped_column(DecimalString(78), nullable=False)
    assets: Mapped[list] = mapped_column(JSON, nullable=False)
    status: Mapped[MintStatus] = mapped_column(
        String(20), default=MintStatus.PENDING, nullable=False
    )
    error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime(), default=utcnow)
    completed_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime(), nullable=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "basket_id": self.basket_id,
            "chain_id": self.chain_id,
            "chain_name": self.chain_name,
            "transaction_id": self.transaction_id,
            "beneficiary": self.beneficiary,
            "amount": str(self.amount),
            "assets": [dict(entry) for entry in self.assets],
            "status": MintStatus(self.status).value,
            "error": self.error,
            "created_at": _iso(self.created_at),
            "completed_at": _iso(self.completed_at),
        }
