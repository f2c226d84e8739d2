"""Single-chain mint endpoints."""

from fastapi import APIRouter, Depends

from bskt.api.deps import get_services, require_api_key
from bskt.contracts.mints import (
    MintListResponse,
    MintRecordInfo,
    MintRecordResponse,
    MintRequest,
    MintResponse,
)
from bskt.registry.mints import mint_record_id
from bskt.services.container import Services

router = APIRouter(prefix="/mints", tags=["Mints"], dependencies=[Depends(require_api_key)])


def record_info(record) -> MintRecordInfo:
    return MintRecordInfo.model_validate(record.to_dict())


@router.post("", response_model=MintResponse)
async def mint(data: MintRequest, services: Services = Depends(get_services)) -> MintResponse:
    """Expand, verify reserves and submit a basket mint."""
    record = await services.orchestrator.mint(data)
    return MintResponse(
        transaction_id=record.transaction_id,
        message=f"Minted {data.amount} of basket {data.basket_id}",
        mint_record=record_info(record),
    )


@router.get("", response_model=MintListResponse)
async def list_mints(services: Services = Depends(get_services)) -> MintListResponse:
    records = await services.mints.list()
    return MintListResponse(
        stats=await services.mints.summary(),
        mints=[record_info(record) for record in records],
    )


@router.get("/status/{transaction_id}", response_model=MintRecordResponse)
async def mint_status(
    transaction_id: str, services: Services = Depends(get_services)
) -> MintRecordResponse:
    record = await services.mints.require(mint_record_id(transaction_id))
    return MintRecordResponse(mint_record=record_info(record))


@router.get("/basket/{basket_id}")
async def basket_mints(basket_id: str, services: Services = Depends(get_services)) -> dict:
    """Mint statistics for a basket."""
    return {
        "success": True,
        "basket_id": basket_id,
        "stats": await services.mints.basket_stats(basket_id),
    }


@router.get("/beneficiary/{address}")
async def beneficiary_mints(address: str, services: Services = Depends(get_services)) -> dict:
    records = await services.mints.by_beneficiary(address)
    return {
        "success": True,
        "beneficiary": address,
        "total_mints": len(records),
        "mints": [record_info(record).model_dump(mode="json") for record in records],
    }


@router.get("/asset/{asset_id}")
async def asset_mints(asset_id: str, services: Services = Depends(get_services)) -> dict:
    """Completed totals for one asset."""
    return {"success": True, **await services.mints.total_minted_by_asset(asset_id)}
