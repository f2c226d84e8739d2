"""Single-chain basket endpoints."""

from decimal import Decimal

from fastapi import APIRouter, Depends

from bskt.api.deps import get_services, require_api_key
from bskt.contracts.baskets import (
    AssetRef,
    BasketCreate,
    BasketInfo,
    BasketListResponse,
    BasketResponse,
    ExpandedAssetInfo,
    ExpandRequest,
    ExpandResponse,
)
from bskt.services.container import Services

router = APIRouter(prefix="/baskets", tags=["Baskets"], dependencies=[Depends(require_api_key)])


async def basket_info(basket, assets) -> BasketInfo:
    """Basket contract with a reference to each asset it holds."""
    data = basket.to_dict()
    for entry in data["assets"]:
        asset = await assets.get(entry["asset_id"])
        entry["asset"] = (
            AssetRef(id=asset.id, symbol=asset.symbol, type=asset.type) if asset else None
        )
    return BasketInfo.model_validate(data)


@router.post("", response_model=BasketResponse)
async def create_basket(
    data: BasketCreate, services: Services = Depends(get_services)
) -> BasketResponse:
    """Create a basket. Weights must sum to 100."""
    basket = await services.baskets.create(data)
    return BasketResponse(
        message=f'Basket "{basket.symbol}" created successfully',
        basket=await basket_info(basket, services.assets),
    )


@router.get("", response_model=BasketListResponse)
async def list_baskets(services: Services = Depends(get_services)) -> BasketListResponse:
    baskets = await services.baskets.list()
    return BasketListResponse(
        total=len(baskets),
        baskets=[await basket_info(basket, services.assets) for basket in baskets],
    )


@router.get("/{basket_id}", response_model=BasketResponse)
async def get_basket(basket_id: str, services: Services = Depends(get_services)) -> BasketResponse:
    basket = await services.baskets.require(basket_id)
    return BasketResponse(basket=await basket_info(basket, services.assets))


@router.post("/{basket_id}/expand", response_model=ExpandResponse)
async def expand_basket(
    basket_id: str,
    data: ExpandRequest,
    services: Services = Depends(get_services),
) -> ExpandResponse:
    """Preview the per-asset amounts for a basket amount."""
    basket = await services.baskets.require(basket_id)
    expanded = await services.baskets.expand(basket_id, Decimal(data.amount))
    return ExpandResponse(
        basket_id=basket_id,
        amount=data.amount,
        assets=[
            ExpandedAssetInfo(
                asset_id=asset.id,
                symbol=asset.symbol,
                type=asset.type,
                weight=entry["weight"],
                amount=str(amount),
            )
            for entry, (asset, amount) in zip(basket.assets, expanded)
        ],
    )
