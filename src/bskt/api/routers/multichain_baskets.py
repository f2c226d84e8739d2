"""Multi-chain basket endpoints."""

from fastapi import APIRouter, Depends

from bskt.api.deps import get_services, require_api_key
from bskt.api.routers.baskets import basket_info
from bskt.contracts.baskets import (
    AddBasketChainRequest,
    BasketListResponse,
    BasketResponse,
    MultiChainBasketCreate,
)
from bskt.services.container import Services

router = APIRouter(
    prefix="/multichain/baskets",
    tags=["Multi-chain Baskets"],
    dependencies=[Depends(require_api_key)],
)


@router.post("", response_model=BasketResponse)
async def create_basket(
    data: MultiChainBasketCreate, services: Services = Depends(get_services)
) -> BasketResponse:
    """Create a basket over one or more supported chains."""
    basket = await services.multichain_baskets.create(data)
    return BasketResponse(
        message=f'Basket "{basket.symbol}" created on {len(basket.supported_chains)} chains',
        basket=await basket_info(basket, services.multichain_assets),
    )


@router.get("", response_model=BasketListResponse)
async def list_baskets(services: Services = Depends(get_services)) -> BasketListResponse:
    baskets = await services.multichain_baskets.list()
    return BasketListResponse(
        total=len(baskets),
        baskets=[await basket_info(b, services.multichain_assets) for b in baskets],
    )


@router.get("/by-chain/{chain_id}", response_model=BasketListResponse)
async def list_baskets_on_chain(
    chain_id: str, services: Services = Depends(get_services)
) -> BasketListResponse:
    baskets = await services.multichain_baskets.list_by_chain(chain_id)
    return BasketListResponse(
        total=len(baskets),
        chain_id=chain_id,
        baskets=[await basket_info(b, services.multichain_assets) for b in baskets],
    )


@router.get("/{basket_id}", response_model=BasketResponse)
async def get_basket(basket_id: str, services: Services = Depends(get_services)) -> BasketResponse:
    basket = await services.multichain_baskets.require(basket_id)
    return BasketResponse(basket=await basket_info(basket, services.multichain_assets))


@router.post("/{basket_id}/add-chain", response_model=BasketResponse)
async def add_chain(
    basket_id: str,
    data: AddBasketChainRequest,
    services: Services = Depends(get_services),
) -> BasketResponse:
    basket = await services.multichain_baskets.add_chain_to_basket(basket_id, data.chain_id)
    return BasketResponse(
        message=f"Chain {data.chain_id} added to basket",
        basket=await basket_info(basket, services.multichain_assets),
    )


@router.delete("/{basket_id}/remove-chain/{chain_id}", response_model=BasketResponse)
async def remove_chain(
    basket_id: str, chain_id: str, services: Services = Depends(get_services)
) -> BasketResponse:
    basket = await services.multichain_baskets.remove_chain_from_basket(basket_id, chain_id)
    return BasketResponse(
        message=f"Chain {chain_id} removed from basket",
        basket=await basket_info(basket, services.multichain_assets),
    )
