"""Chain registry contracts."""

from typing import Any, Optional

from pydantic import BaseModel, Field

from bskt.contracts.common import UrlStr
from bskt.registry.models import ChainName


class NativeCurrency(BaseModel):
    """Native currency of a chain."""

    name: str = Field(..., min_length=1)
    symbol: str = Field(..., min_length=1, max_length=20)
    decimals: int = Field(..., ge=0, le=36)


class ChainCreate(BaseModel):
    """Request to register a chain."""

    id: str = Field(..., min_length=1, max_length=100, description="Chain key (ethereum-mainnet)")
    name: ChainName = Field(..., description="Symbolic network name")
    display_name: str = Field(..., min_length=1, max_length=255)
    chain_id: int = Field(..., gt=0, description="Numeric network id (1 for Ethereum)")
    rpc_url: UrlStr = Field(..., description="RPC endpoint")
    explorer_url: UrlStr = Field(..., description="Block explorer URL")
    native_currency: NativeCurrency
    is_testnet: bool = False
    metadata: Optional[dict[str, Any]] = None


class ChainUpdate(BaseModel):
    """Partial chain update. Only provided fields are merged."""

    name: Optional[ChainName] = None
    display_name: Optional[str] = Field(None, min_length=1, max_length=255)
    chain_id: Optional[int] = Field(None, gt=0)
    rpc_url: Optional[UrlStr] = None
    explorer_url: Optional[UrlStr] = None
    native_currency: Optional[NativeCurrency] = None
    is_testnet: Optional[bool] = None
    metadata: Optional[dict[str, Any]] = None


class ChainInfo(BaseModel):
    """Stored chain descriptor."""

    id: str
    name: str
    display_name: str
    chain_id: int
    rpc_url: str
    explorer_url: str
    native_currency: NativeCurrency
    is_testnet: bool
    metadata: Optional[dict[str, Any]] = None
    created_at: str
    updated_at: str


class ChainResponse(BaseModel):
    """Response wrapping a single chain."""

    success: bool = True
    message: Optional[str] = None
    chain: ChainInfo


class ChainListResponse(BaseModel):
    """Response containing list of chains."""

    success: bool = True
    total: int = 0
    chains: list[ChainInfo] = Field(default_factory=list)
