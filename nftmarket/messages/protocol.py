"""
Wire protocol for transactions and projections, using msgspec.

Key patterns:
- One tagged msgspec.Struct per transaction kind; the "type" field selects
  the struct when decoding the Transaction union
- Frozen structs: a decoded transaction is never mutated
- Amounts, ids and durations are non-negative integers; amounts are in the
  smallest currency unit
"""

from typing import Annotated, Any, Final, TypeAlias

import msgspec

from nftmarket.registry.asset import Asset, AssetDetails, Auction

UInt: TypeAlias = Annotated[int, msgspec.Meta(ge=0)]


class TxBase(msgspec.Struct, frozen=True, tag_field="type", kw_only=True):
    """Fields shared by every transaction"""

    sender: str  # authorizing account


class Initialize(TxBase, frozen=True, tag="initialize"):
    pass


class Mint(TxBase, frozen=True, tag="mint"):
    name: str
    description: str
    uri: str
    rarity: UInt


class StartAuction(TxBase, frozen=True, tag="start_auction"):
    account: str
    asset_id: UInt
    starting_price: UInt
    duration: UInt


class PlaceBid(TxBase, frozen=True, tag="place_bid"):
    account: str
    asset_id: UInt
    amount: UInt


class EndAuction(TxBase, frozen=True, tag="end_auction"):
    account: str
    asset_id: UInt


class TransferOwnership(TxBase, frozen=True, tag="transfer_ownership"):
    account: str
    asset_id: UInt
    new_owner: str


class SetPrice(TxBase, frozen=True, tag="set_price"):
    account: str
    asset_id: UInt
    price: UInt


class ListForSale(TxBase, frozen=True, tag="list_for_sale"):
    account: str
    asset_id: UInt
    price: UInt


class Purchase(TxBase, frozen=True, tag="purchase"):
    account: str
    asset_id: UInt
    payment: UInt


Transaction: TypeAlias = (
    Initialize
    | Mint
    | StartAuction
    | PlaceBid
    | EndAuction
    | TransferOwnership
    | SetPrice
    | ListForSale
    | Purchase
)

TRANSACTION_KINDS: Final[tuple[str, ...]] = (
    "initialize",
    "mint",
    "start_auction",
    "place_bid",
    "end_auction",
    "transfer_ownership",
    "set_price",
    "list_for_sale",
    "purchase",
)


class TxReceipt(msgspec.Struct, frozen=True, omit_defaults=True):
    """Outcome of one submitted transaction"""

    ok: bool
    kind: str
    tx_id: str
    result: Any = None
    code: str | None = None
    error: str | None = None


class Funding(msgspec.Struct, frozen=True):
    account: str
    amount: UInt


##############
# PROJECTIONS
# ############


class AuctionView(msgspec.Struct, frozen=True):
    asset_id: int
    starting_price: int
    end_time: int
    highest_bid: int
    highest_bidder: str

    @classmethod
    def from_auction(cls, auction: Auction) -> "AuctionView":
        return cls(
            asset_id=auction.asset_id,
            starting_price=auction.starting_price,
            end_time=auction.end_time,
            highest_bid=auction.highest_bid,
            highest_bidder=auction.highest_bidder,
        )


class AssetView(msgspec.Struct, frozen=True):
    id: int
    owner: str
    name: str
    description: str
    uri: str
    price: int
    for_sale: bool
    rarity: int
    auction: AuctionView | None = None

    @classmethod
    def from_details(cls, details: AssetDetails) -> "AssetView":
        return cls(**details._asdict())

    @classmethod
    def from_asset(cls, asset: Asset) -> "AssetView":
        auction = asset.auction
        return cls(
            **asset.details()._asdict(),
            auction=(
                AuctionView.from_auction(auction)
                if isinstance(auction, Auction)
                else None
            ),
        )
