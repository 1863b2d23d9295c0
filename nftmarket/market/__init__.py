"""Listings, auctions, ownership transfer, fees and query projections."""

from nftmarket.market.auction import BidReceipt
from nftmarket.market.fees import FEE_PCT, FeeSplit, Settlement
from nftmarket.market.marketplace import Marketplace
from nftmarket.market.stats import MarketStats

__all__ = [
    "BidReceipt",
    "FEE_PCT",
    "FeeSplit",
    "Marketplace",
    "MarketStats",
    "Settlement",
]
