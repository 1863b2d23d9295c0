from collections.abc import Callable
from typing import TypeVar

import structlog

from nftmarket.core.errors import MarketError
from nftmarket.core.logging import Logger
from nftmarket.ledger.host import Host, WorldState
from nftmarket.market import auction, listing, ownership, queries
from nftmarket.market.auction import BidReceipt
from nftmarket.market.fees import Settlement
from nftmarket.market.stats import MarketStats
from nftmarket.registry.asset import Asset, AssetDetails, Auction

logger: Logger = structlog.getLogger(__name__)

T = TypeVar("T")


class Marketplace:
    """
    External interface of the marketplace.

    One method per transaction kind, each run atomically on the host with
    the sender as the authorizing account, plus read-only projections over
    the last committed state.
    """

    __slots__ = ("_host", "_stats")

    def __init__(self, host: Host | None = None) -> None:
        self._host = host or Host()
        self._stats = MarketStats()

    @property
    def host(self) -> Host:
        return self._host

    @property
    def stats(self) -> MarketStats:
        return self._stats

    def _execute(self, kind: str, sender: str, op: Callable[[WorldState], T]) -> T:
        try:
            with self._host.atomic() as state:
                result = op(state)
        except MarketError as e:
            self._stats.aborted += 1
            self._stats.aborted_by_code[e.code.value] += 1
            logger.warning(
                f"{kind} aborted: {e}", kind=kind, sender=sender, code=e.code.value
            )
            raise

        self._stats.committed += 1
        self._stats.committed_by_kind[kind] += 1
        return result

    def _record_settlement(self, settlement: Settlement) -> None:
        self._stats.sale_volume += settlement.amount
        self._stats.fees_paid += settlement.fee

    # ---------------------------
    # Transactions
    # ---------------------------

    def initialize(self, sender: str) -> None:
        self._execute(
            "initialize", sender, lambda state: state.registries.initialize(sender)
        )
        logger.info(f"Registry initialized for {sender}")

    def mint(
        self, sender: str, name: str, description: str, uri: str, rarity: int
    ) -> int:
        asset = self._execute(
            "mint",
            sender,
            lambda state: state.registries.get(sender).mint(
                owner=sender,
                name=name,
                description=description,
                uri=uri,
                rarity=rarity,
            ),
        )
        self._stats.assets_minted += 1
        logger.info(f"Minted asset {asset.id}", account=sender, rarity=rarity)
        return asset.id

    def start_auction(
        self,
        sender: str,
        account: str,
        asset_id: int,
        starting_price: int,
        duration: int,
    ) -> Auction:
        now = self._host.now_seconds()
        opened = self._execute(
            "start_auction",
            sender,
            lambda state: auction.start(
                state, now, sender, account, asset_id, starting_price, duration
            ),
        )
        logger.info(
            f"Auction opened on asset {asset_id}",
            account=account,
            starting_price=starting_price,
            end_time=opened.end_time,
        )
        return opened

    def place_bid(
        self, sender: str, account: str, asset_id: int, amount: int
    ) -> BidReceipt:
        receipt = self._execute(
            "place_bid",
            sender,
            lambda state: auction.place_bid(state, sender, account, asset_id, amount),
        )
        self._stats.bids += 1
        self._stats.fees_paid += receipt.fee
        logger.info(
            f"Bid {amount} on asset {asset_id}",
            account=account,
            bidder=sender,
            charged=receipt.total_charged,
        )
        return receipt

    def end_auction(self, sender: str, account: str, asset_id: int) -> Settlement:
        now = self._host.now_seconds()
        settlement = self._execute(
            "end_auction",
            sender,
            lambda state: auction.end(state, now, sender, account, asset_id),
        )
        self._stats.settlements += 1
        self._record_settlement(settlement)
        logger.info(
            f"Auction on asset {asset_id} settled",
            account=account,
            winner=settlement.buyer,
            amount=settlement.amount,
        )
        return settlement

    def transfer_ownership(
        self, sender: str, account: str, asset_id: int, new_owner: str
    ) -> None:
        self._execute(
            "transfer_ownership",
            sender,
            lambda state: ownership.transfer_ownership(
                state, sender, account, asset_id, new_owner
            ),
        )
        logger.info(
            f"Asset {asset_id} transferred to {new_owner}",
            account=account,
            previous_owner=sender,
        )

    def set_price(self, sender: str, account: str, asset_id: int, price: int) -> None:
        self._execute(
            "set_price",
            sender,
            lambda state: listing.set_price(state, sender, account, asset_id, price),
        )
        logger.info(f"Asset {asset_id} priced at {price}", account=account)

    def list_for_sale(
        self, sender: str, account: str, asset_id: int, price: int
    ) -> None:
        self._execute(
            "list_for_sale",
            sender,
            lambda state: listing.list_for_sale(
                state, sender, account, asset_id, price
            ),
        )
        logger.info(f"Asset {asset_id} listed at {price}", account=account)

    def purchase(
        self, sender: str, account: str, asset_id: int, payment: int
    ) -> Settlement:
        settlement = self._execute(
            "purchase",
            sender,
            lambda state: listing.purchase(state, sender, account, asset_id, payment),
        )
        self._stats.sales += 1
        self._record_settlement(settlement)
        logger.info(
            f"Asset {asset_id} sold to {sender}",
            account=account,
            price=settlement.amount,
            fee=settlement.fee,
        )
        return settlement

    # -------------------------------
    # Read-only projections
    # -------------------------------

    def is_initialized(self, account: str) -> bool:
        return queries.is_initialized(self._host.state.registries, account)

    def get_owner(self, account: str, asset_id: int) -> str:
        return queries.get_owner(self._host.state.registries, account, asset_id)

    def get_details(self, account: str, asset_id: int) -> AssetDetails:
        return queries.get_details(self._host.state.registries, account, asset_id)

    def get_auction(self, account: str, asset_id: int) -> Auction | None:
        return queries.get_auction(self._host.state.registries, account, asset_id)

    def get_all_for_sale(self, account: str, limit: int, offset: int) -> list[Asset]:
        return queries.get_all_for_sale(
            self._host.state.registries, account, limit, offset
        )

    def get_by_rarity(self, account: str, rarity: int) -> list[int]:
        return queries.get_by_rarity(self._host.state.registries, account, rarity)

    def balance_of(self, account: str) -> int:
        return self._host.state.balances.balance_of(account)

    # -------------------------------
    # Host administration
    # -------------------------------

    def fund(self, account: str, amount: int) -> int:
        """Credit newly issued funds to an account (outside any transaction)."""
        with self._host.atomic() as state:
            balance = state.balances.credit(account, amount)
        logger.info(f"Funded {account} with {amount}", balance=balance)
        return balance
