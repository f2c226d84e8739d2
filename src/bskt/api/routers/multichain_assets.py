"""Multi-chain asset endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from bskt.api.deps import get_services, require_api_key
from bskt.contracts.assets import (
    AddAssetChainRequest,
    ChainRef,
    MultiChainAssetCreate,
    MultiChainAssetInfo,
    MultiChainAssetListResponse,
    MultiChainAssetResponse,
)
from bskt.registry.assets import count_by_type
from bskt.registry.models import AssetType
from bskt.services.container import Services

router = APIRouter(
    prefix="/multichain/assets",
    tags=["Multi-chain Assets"],
    dependencies=[Depends(require_api_key)],
)


async def asset_info(asset, chains) -> MultiChainAssetInfo:
    """Asset contract with the name of every chain it is deployed on."""
    data = asset.to_dict()
    for chain_id, deployment in data["chains"].items():
        chain = await chains.get(chain_id)
        deployment["chain"] = ChainRef(id=chain.id, name=chain.display_name) if chain else None
    data["chains_deployed"] = len(data["chains"])
    return MultiChainAssetInfo.model_validate(data)


async def _list_response(assets, chains, chain_id: Optional[str] = None):
    return MultiChainAssetListResponse(
        total=len(assets),
        chain_id=chain_id,
        by_type=count_by_type(assets),
        assets=[await asset_info(asset, chains) for asset in assets],
    )


@router.post("/register", response_model=MultiChainAssetResponse)
async def register_asset(
    data: MultiChainAssetCreate, services: Services = Depends(get_services)
) -> MultiChainAssetResponse:
    """Register an asset with its per-chain deployments."""
    asset = await services.multichain_assets.register(data)
    return MultiChainAssetResponse(
        message=f'Asset "{asset.symbol}" registered on {len(asset.chains)} chains',
        asset=await asset_info(asset, services.chains),
    )


@router.get("", response_model=MultiChainAssetListResponse)
async def list_assets(
    asset_type: Optional[AssetType] = Query(None, alias="type"),
    services: Services = Depends(get_services),
) -> MultiChainAssetListResponse:
    if asset_type is None:
        assets = await services.multichain_assets.list()
    else:
        assets = await services.multichain_assets.list_by_type(asset_type)
    return await _list_response(assets, services.chains)


@router.get("/by-chain/{chain_id}", response_model=MultiChainAssetListResponse)
async def list_assets_on_chain(
    chain_id: str, services: Services = Depends(get_services)
) -> MultiChainAssetListResponse:
    assets = await services.multichain_assets.list_by_chain(chain_id)
    return await _list_response(assets, services.chains, chain_id)


@router.get("/{asset_id}", response_model=MultiChainAssetResponse)
async def get_asset(
    asset_id: str, services: Services = Depends(get_services)
) -> MultiChainAssetResponse:
    asset = await services.multichain_assets.require(asset_id)
    return MultiChainAssetResponse(asset=await asset_info(asset, services.chains))


@router.post("/{asset_id}/add-chain", response_model=MultiChainAssetResponse)
async def add_chain(
    asset_id: str,
    data: AddAssetChainRequest,
    services: Services = Depends(get_services),
) -> MultiChainAssetResponse:
    asset = await services.multichain_assets.add_chain(asset_id, data.chain_id, data)
    return MultiChainAssetResponse(
        message=f"Asset added to chain {data.chain_id}",
        asset=await asset_info(asset, services.chains),
    )


@router.delete("/{asset_id}/remove-chain/{chain_id}", response_model=MultiChainAssetResponse)
async def remove_chain(
    asset_id: str, chain_id: str, services: Services = Depends(get_services)
) -> MultiChainAssetResponse:
    asset = await services.multichain_assets.remove_chain(asset_id, chain_id)
    return MultiChainAssetResponse(
        message=f"Asset removed from chain {chain_id}",
        asset=await asset_info(asset, services.chains),
    )
