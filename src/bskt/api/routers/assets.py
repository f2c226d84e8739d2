"""Single-chain asset endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from bskt.api.deps import get_services, require_api_key
from bskt.contracts.assets import AssetCreate, AssetInfo, AssetListResponse, AssetResponse
from bskt.registry.assets import count_by_type
from bskt.registry.models import AssetType
from bskt.services.container import Services

router = APIRouter(prefix="/assets", tags=["Assets"], dependencies=[Depends(require_api_key)])


def _list_response(assets) -> AssetListResponse:
    return AssetListResponse(
        total=len(assets),
        by_type=count_by_type(assets),
        assets=[AssetInfo.model_validate(asset.to_dict()) for asset in assets],
    )


@router.post("/register", response_model=AssetResponse)
async def register_asset(
    data: AssetCreate, services: Services = Depends(get_services)
) -> AssetResponse:
    """Register a single-chain asset."""
    asset = await services.assets.register(data)
    return AssetResponse(
        message=f'Asset "{asset.symbol}" registered successfully',
        asset=AssetInfo.model_validate(asset.to_dict()),
    )


@router.get("", response_model=AssetListResponse)
async def list_assets(
    asset_type: Optional[AssetType] = Query(None, alias="type"),
    services: Services = Depends(get_services),
) -> AssetListResponse:
    if asset_type is None:
        return _list_response(await services.assets.list())
    return _list_response(await services.assets.list_by_type(asset_type))


@router.get("/type/{asset_type}", response_model=AssetListResponse)
async def list_assets_by_type(
    asset_type: AssetType, services: Services = Depends(get_services)
) -> AssetListResponse:
    return _list_response(await services.assets.list_by_type(asset_type))


@router.get("/{asset_id}", response_model=AssetResponse)
async def get_asset(asset_id: str, services: Services = Depends(get_services)) -> AssetResponse:
    asset = await services.assets.require(asset_id)
    return AssetResponse(asset=AssetInfo.model_validate(asset.to_dict()))
