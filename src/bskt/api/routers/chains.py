"""Chain registry endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from bskt.api.deps import get_services, require_api_key
from bskt.contracts.chains import (
    ChainCreate,
    ChainInfo,
    ChainListResponse,
    ChainResponse,
    ChainUpdate,
)
from bskt.registry.models import NetType
from bskt.services.container import Services

router = APIRouter(prefix="/chains", tags=["Chains"], dependencies=[Depends(require_api_key)])


@router.post("/register", response_model=ChainResponse)
async def register_chain(
    data: ChainCreate, services: Services = Depends(get_services)
) -> ChainResponse:
    """Register a chain."""
    chain = await services.chains.register(data)
    return ChainResponse(
        message=f'Chain "{chain.display_name}" registered successfully',
        chain=ChainInfo.model_validate(chain.to_dict()),
    )


@router.get("", response_model=ChainListResponse)
async def list_chains(
    net_type: Optional[NetType] = Query(None, alias="type"),
    services: Services = Depends(get_services),
) -> ChainListResponse:
    """List chains, optionally only mainnets or testnets."""
    if net_type is None:
        chains = await services.chains.list()
    else:
        chains = await services.chains.list_by_net_type(net_type)
    return ChainListResponse(
        total=len(chains),
        chains=[ChainInfo.model_validate(chain.to_dict()) for chain in chains],
    )


@router.get("/{chain_id}", response_model=ChainResponse)
async def get_chain(chain_id: str, services: Services = Depends(get_services)) -> ChainResponse:
    chain = await services.chains.require(chain_id)
    return ChainResponse(chain=ChainInfo.model_validate(chain.to_dict()))


@router.put("/{chain_id}", response_model=ChainResponse)
async def update_chain(
    chain_id: str, data: ChainUpdate, services: Services = Depends(get_services)
) -> ChainResponse:
    """Merge the provided fields into a chain."""
    chain = await services.chains.update(chain_id, data)
    return ChainResponse(
        message=f'Chain "{chain.display_name}" updated successfully',
        chain=ChainInfo.model_validate(chain.to_dict()),
    )
