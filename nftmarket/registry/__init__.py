"""Per-account asset registries."""

from nftmarket.registry.asset import (
    NO_AUCTION,
    Asset,
    AssetDetails,
    Auction,
    AuctionSlot,
    NoAuction,
)
from nftmarket.registry.registry import Registry, RegistryStore

__all__ = [
    "Asset",
    "AssetDetails",
    "Auction",
    "AuctionSlot",
    "NoAuction",
    "NO_AUCTION",
    "Registry",
    "RegistryStore",
]
