from dataclasses import dataclass, field
from typing import Final, NamedTuple, TypeAlias


class NoAuction:
    """Auction slot value for an asset with no auction open"""

    __slots__ = ()

    def __repr__(self) -> str:
        return "NO_AUCTION"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, NoAuction)

    def __hash__(self) -> int:
        return hash(NoAuction)

    def __deepcopy__(self, memo: dict) -> "NoAuction":
        return self


NO_AUCTION: Final[NoAuction] = NoAuction()


@dataclass(slots=True)
class Auction:
    """Ascending-bid auction embedded in an asset"""

    asset_id: int
    starting_price: int
    end_time: int  # Unix seconds, absolute
    highest_bid: int
    highest_bidder: str

    def has_ended(self, now: int) -> bool:
        return now >= self.end_time


AuctionSlot: TypeAlias = NoAuction | Auction


@dataclass(slots=True)
class Asset:
    """Single minted asset record"""

    id: int  # index in the owning registry
    owner: str
    name: str
    description: str
    uri: str
    rarity: int
    price: int = 0
    for_sale: bool = False
    auction: AuctionSlot = field(default=NO_AUCTION)

    @property
    def has_auction(self) -> bool:
        return isinstance(self.auction, Auction)

    def details(self) -> "AssetDetails":
        return AssetDetails(
            id=self.id,
            owner=self.owner,
            name=self.name,
            description=self.description,
            uri=self.uri,
            price=self.price,
            for_sale=self.for_sale,
            rarity=self.rarity,
        )


class AssetDetails(NamedTuple):
    id: int
    owner: str
    name: str
    description: str
    uri: str
    price: int
    for_sale: bool
    rarity: int
