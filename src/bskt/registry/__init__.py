"""Persistent registries for chains, assets, baskets and mint records."""

from bskt.registry.assets import AssetRegistry, MultiChainAssetRegistry
from bskt.registry.baskets import BasketRegistry, MultiChainBasketRegistry
from bskt.registry.chains import ChainRegistry
from bskt.registry.database import Database
from bskt.registry.mints import MintStateService, MultiChainMintStateService

__all__ = [
    "AssetRegistry",
    "BasketRegistry",
    "ChainRegistry",
    "Database",
    "MintStateService",
    "MultiChainAssetRegistry",
    "MultiChainBasketRegistry",
    "MultiChainMintStateService",
]
