"""
Ascending-bid auctions.

An asset's auction slot moves NO_AUCTION -> Auction (open) -> NO_AUCTION
(settled). Bids must strictly exceed the current highest bid. Settlement is
allowed from end_time onwards and hands the asset to the highest bidder; if
nobody bid, the placeholder bidder is the owner who opened the auction.
"""

from typing import NamedTuple

from nftmarket.core.errors import ErrorCode, PreconditionError, StateConflictError
from nftmarket.ledger.host import WorldState
from nftmarket.market import fees
from nftmarket.market.fees import Settlement
from nftmarket.market.ownership import require_owner
from nftmarket.registry.asset import NO_AUCTION, Asset, Auction


class BidReceipt(NamedTuple):
    asset_id: int
    bidder: str
    amount: int
    escrowed: int  # paid to the registry account
    fee: int
    seller_revenue: int

    @property
    def total_charged(self) -> int:
        return self.escrowed + self.fee + self.seller_revenue


def _open_auction(asset: Asset) -> Auction:
    match asset.auction:
        case Auction() as auction:
            return auction
        case _:
            raise PreconditionError(
                ErrorCode.NO_AUCTION, f"No auction open on asset {asset.id}"
            )


def start(
    state: WorldState,
    now: int,
    caller: str,
    account: str,
    asset_id: int,
    starting_price: int,
    duration: int,
) -> Auction:
    asset = require_owner(state, caller, account, asset_id)
    if asset.has_auction:
        raise StateConflictError(
            ErrorCode.AUCTION_EXISTS, f"Asset {asset_id} already has an auction"
        )

    auction = Auction(
        asset_id=asset_id,
        starting_price=starting_price,
        end_time=now + duration,
        highest_bid=starting_price,
        highest_bidder=asset.owner,
    )
    asset.auction = auction
    return auction


def place_bid(
    state: WorldState, bidder: str, account: str, asset_id: int, amount: int
) -> BidReceipt:
    """
    Outbid the current highest bid.

    The bidder escrows the bid with the registry account and is then charged
    the settlement split of the bid again: the seller's revenue goes to the
    current owner and the fee to the registry account. Earlier bidders are
    not refunded.
    """
    asset = state.registries.asset(account, asset_id)
    auction = _open_auction(asset)
    if amount <= auction.highest_bid:
        raise PreconditionError(
            ErrorCode.BID_TOO_LOW,
            f"bid {amount} does not exceed highest bid {auction.highest_bid}",
        )

    state.balances.transfer(bidder, account, amount)

    cut, seller_revenue = fees.split(amount)
    state.balances.transfer(bidder, asset.owner, seller_revenue)
    state.balances.transfer(bidder, account, cut)

    auction.highest_bid = amount
    auction.highest_bidder = bidder

    return BidReceipt(
        asset_id=asset_id,
        bidder=bidder,
        amount=amount,
        escrowed=amount,
        fee=cut,
        seller_revenue=seller_revenue,
    )


def end(
    state: WorldState, now: int, caller: str, account: str, asset_id: int
) -> Settlement:
    """
    Settle an auction whose end time has been reached.

    Anyone may settle. The caller pays the seller's revenue on the winning
    bid to the previous owner and the fee to itself. Any fixed-price listing
    on the asset is left in place for the new owner.
    """
    asset = state.registries.asset(account, asset_id)
    auction = _open_auction(asset)
    if not auction.has_ended(now):
        raise PreconditionError(
            ErrorCode.AUCTION_NOT_ENDED,
            f"auction on asset {asset_id} ends at {auction.end_time}, now {now}",
        )

    asset.auction = NO_AUCTION
    seller = asset.owner
    asset.owner = auction.highest_bidder

    cut, seller_revenue = fees.split(auction.highest_bid)
    state.balances.transfer(caller, seller, seller_revenue)
    state.balances.transfer(caller, caller, cut)

    return Settlement(
        asset_id=asset_id,
        seller=seller,
        buyer=auction.highest_bidder,
        amount=auction.highest_bid,
        fee=cut,
        seller_revenue=seller_revenue,
        fee_recipient=caller,
    )
