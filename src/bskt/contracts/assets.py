"""Asset registry contracts (single-chain and multi-chain)."""

from typing import Any, Optional

from pydantic import BaseModel, Field

from bskt.contracts.common import AddressStr
from bskt.registry.models import AssetType


class AssetCreate(BaseModel):
    """Request to register a single-chain asset."""

    id: str = Field(..., min_length=1, max_length=100)
    type: AssetType
    name: str = Field(..., min_length=1, max_length=255)
    symbol: str = Field(..., min_length=1, max_length=20)
    decimals: Optional[int] = Field(None, ge=0, le=18)
    contract_address: AddressStr
    metadata: Optional[dict[str, Any]] = None


class AssetInfo(BaseModel):
    """Stored single-chain asset."""

    id: str
    type: AssetType
    name: str
    symbol: str
    decimals: Optional[int] = None
    contract_address: str
    metadata: Optional[dict[str, Any]] = None
    created_at: str
    updated_at: str


class AssetResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    asset: AssetInfo


class AssetListResponse(BaseModel):
    success: bool = True
    total: int = 0
    by_type: dict[str, int] = Field(default_factory=dict)
    assets: list[AssetInfo] = Field(default_factory=list)


class ChainDeployment(BaseModel):
    """Where a multi-chain asset lives on one chain."""

    contract_address: AddressStr
    decimals: Optional[int] = Field(None, ge=0, le=18)
    metadata: Optional[dict[str, Any]] = None


class MultiChainAssetCreate(BaseModel):
    """Request to register a multi-chain asset."""

    id: str = Field(..., min_length=1, max_length=100)
    type: AssetType
    name: str = Field(..., min_length=1, max_length=255)
    symbol: str = Field(..., min_length=1, max_length=20)
    decimals: Optional[int] = Field(None, ge=0, le=18)
    chains: dict[str, ChainDeployment] = Field(default_factory=dict)
    default_chain: str = Field(..., min_length=1)
    metadata: Optional[dict[str, Any]] = None


class AddAssetChainRequest(ChainDeployment):
    """Request to deploy an existing asset on another chain."""

    chain_id: str = Field(..., min_length=1)


class ChainRef(BaseModel):
    id: str
    name: str


class DeploymentInfo(ChainDeployment):
    contract_address: str
    chain: Optional[ChainRef] = None


class MultiChainAssetInfo(BaseModel):
    """Stored multi-chain asset."""

    id: str
    type: AssetType
    name: str
    symbol: str
    decimals: Optional[int] = None
    chains: dict[str, DeploymentInfo]
    default_chain: str
    chains_deployed: int = 0
    metadata: Optional[dict[str, Any]] = None
    created_at: str
    updated_at: str


class MultiChainAssetResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    asset: MultiChainAssetInfo


class MultiChainAssetListResponse(BaseModel):
    success: bool = True
    total: int = 0
    chain_id: Optional[str] = None
    by_type: dict[str, int] = Field(default_factory=dict)
    assets: list[MultiChainAssetInfo] = Field(default_factory=list)
