"""Basket registry contracts (single-chain and multi-chain)."""

from typing import Optional

from pydantic import BaseModel, Field

from bskt.contracts.common import AmountStr
from bskt.registry.models import AssetType, BasketStatus


class BasketAssetEntry(BaseModel):
    """One weighted asset of a basket."""

    asset_id: str = Field(..., min_length=1)
    weight: int = Field(..., ge=0, le=100, description="Percentage of the basket")
    proportion: str = Field(default="", description="Display label for the share")


class ChainBasketAssetEntry(BasketAssetEntry):
    """Weighted asset, optionally pinned to one chain."""

    chain_id: Optional[str] = None


class BasketCreate(BaseModel):
    """Request to create a single-chain basket."""

    id: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=255)
    symbol: str = Field(..., min_length=1, max_length=20)
    description: Optional[str] = None
    assets: list[BasketAssetEntry]


class MultiChainBasketCreate(BaseModel):
    """Request to create a multi-chain basket."""

    id: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=255)
    symbol: str = Field(..., min_length=1, max_length=20)
    description: Optional[str] = None
    assets: list[ChainBasketAssetEntry]
    supported_chains: list[str] = Field(default_factory=list)
    default_chain: str


class AddBasketChainRequest(BaseModel):
    chain_id: str = Field(..., min_length=1)


class AssetRef(BaseModel):
    id: str
    symbol: str
    type: AssetType


class BasketAssetInfo(ChainBasketAssetEntry):
    asset: Optional[AssetRef] = None


class BasketInfo(BaseModel):
    """Stored basket. `supported_chains`/`default_chain` are multi-chain only."""

    id: str
    name: str
    symbol: str
    description: Optional[str] = None
    status: BasketStatus
    assets: list[BasketAssetInfo]
    supported_chains: Optional[list[str]] = None
    default_chain: Optional[str] = None
    created_at: str
    updated_at: str


class BasketResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    basket: BasketInfo


class BasketListResponse(BaseModel):
    success: bool = True
    total: int = 0
    chain_id: Optional[str] = None
    baskets: list[BasketInfo] = Field(default_factory=list)


class ExpandRequest(BaseModel):
    amount: AmountStr


class ExpandedAssetInfo(BaseModel):
    asset_id: str
    symbol: str
    type: AssetType
    weight: int
    amount: str


class ExpandResponse(BaseModel):
    success: bool = True
    basket_id: str
    amount: str
    assets: list[ExpandedAssetInfo]
