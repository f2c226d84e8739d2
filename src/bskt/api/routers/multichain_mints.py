"""Multi-chain mint endpoints."""

from fastapi import APIRouter, Depends

from bskt.api.deps import get_services, require_api_key
from bskt.api.routers.mints import record_info
from bskt.contracts.mints import (
    MintListResponse,
    MintRecordResponse,
    MintResponse,
    MultiChainMintRequest,
)
from bskt.services.container import Services

router = APIRouter(
    prefix="/multichain/mints",
    tags=["Multi-chain Mints"],
    dependencies=[Depends(require_api_key)],
)


@router.post("", response_model=MintResponse)
async def mint(
    data: MultiChainMintRequest, services: Services = Depends(get_services)
) -> MintResponse:
    """Mint a multi-chain basket on one chain (basket default when omitted)."""
    record = await services.orchestrator.mint_multichain(data)
    return MintResponse(
        transaction_id=record.transaction_id,
        message=f"Minted {data.amount} of basket {data.basket_id} on {record.chain_name}",
        mint_record=record_info(record),
    )


@router.get("", response_model=MintListResponse)
async def list_mints(services: Services = Depends(get_services)) -> MintListResponse:
    records = await services.multichain_mints.list()
    return MintListResponse(
        stats=await services.multichain_mints.summary(),
        mints=[record_info(record) for record in records],
    )


@router.get("/chain/{chain_id}", response_model=MintListResponse)
async def chain_mints(chain_id: str, services: Services = Depends(get_services)) -> MintListResponse:
    records = await services.multichain_mints.by_chain(chain_id)
    return MintListResponse(
        stats=await services.multichain_mints.chain_stats(chain_id),
        mints=[record_info(record) for record in records],
    )


@router.get("/basket/{basket_id}")
async def basket_mints(basket_id: str, services: Services = Depends(get_services)) -> dict:
    """Cross-chain statistics for a basket."""
    return {
        "success": True,
        "basket_id": basket_id,
        "stats": await services.multichain_mints.basket_cross_chain_stats(basket_id),
    }


@router.get("/beneficiary/{address}")
async def beneficiary_mints(address: str, services: Services = Depends(get_services)) -> dict:
    """Cross-chain statistics for a beneficiary."""
    return {
        "success": True,
        "stats": await services.multichain_mints.beneficiary_cross_chain_stats(address),
    }


@router.get("/{mint_id}", response_model=MintRecordResponse)
async def get_mint(mint_id: str, services: Services = Depends(get_services)) -> MintRecordResponse:
    record = await services.multichain_mints.require(mint_id)
    return MintRecordResponse(mint_record=record_info(record))
