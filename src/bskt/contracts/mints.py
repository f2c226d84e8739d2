"""Mint request and mint record contracts."""

from typing import Optional

from pydantic import BaseModel, Field

from bskt.contracts.common import TRANSACTION_ID_PATTERN, AddressStr, AmountStr
from bskt.registry.models import AssetType, MintStatus


class MintRequest(BaseModel):
    """Request to mint a single-chain basket."""

    basket_id: str = Field(..., min_length=1)
    beneficiary: AddressStr
    amount: AmountStr
    asset_type_filter: Optional[AssetType] = None
    transaction_id: Optional[str] = Field(
        None,
        pattern=TRANSACTION_ID_PATTERN,
        description="Client-chosen id; generated when omitted",
    )


class MultiChainMintRequest(MintRequest):
    """Request to mint a multi-chain basket on one chain."""

    chain_id: Optional[str] = Field(None, description="Target chain; basket default when omitted")


class MintedAsset(BaseModel):
    """One per-asset transfer instruction of a mint."""

    asset_id: str
    symbol: str
    type: AssetType
    amount: str
    contract_address: str
    tx_hash: Optional[str] = None


class ChainMintedAsset(MintedAsset):
    chain_id: str
    chain_name: str
    explorer_url: Optional[str] = None


class MintRecordInfo(BaseModel):
    """Stored mint record. Chain fields are multi-chain only."""

    id: str
    basket_id: str
    transaction_id: str
    beneficiary: str
    amount: str
    assets: list[ChainMintedAsset | MintedAsset]
    status: MintStatus
    chain_id: Optional[str] = None
    chain_name: Optional[str] = None
    error: Optional[str] = None
    created_at: str
    completed_at: Optional[str] = None


class MintResponse(BaseModel):
    success: bool = True
    transaction_id: str
    message: Optional[str] = None
    mint_record: MintRecordInfo


class MintRecordResponse(BaseModel):
    success: bool = True
    mint_record: MintRecordInfo


class MintListResponse(BaseModel):
    success: bool = True
    stats: dict
    mints: list[MintRecordInfo] = Field(default_factory=list)
