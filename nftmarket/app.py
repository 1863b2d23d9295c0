import asyncio
import signal
from dataclasses import dataclass
from typing import Any, assert_never

import structlog
from codetiming import Timer

from nftmarket.core.config import settings
from nftmarket.core.errors import MarketError
from nftmarket.core.logging import Logger, bind_transaction, generate_tx_id
from nftmarket.ledger.host import Host
from nftmarket.market.marketplace import Marketplace
from nftmarket.messages.protocol import (
    AuctionView,
    EndAuction,
    Initialize,
    ListForSale,
    Mint,
    PlaceBid,
    Purchase,
    SetPrice,
    StartAuction,
    Transaction,
    TransferOwnership,
    TxReceipt,
)
from nftmarket.server import HTTPServer

logger: Logger = structlog.getLogger(__name__)


@dataclass(slots=True)
class NodeStats:
    """Submission-level statistics for the node."""

    submitted: int = 0
    processing_time_ms: float = 0.0

    @property
    def avg_processing_time_ms(self) -> float:
        if self.submitted > 0:
            return self.processing_time_ms / self.submitted
        return 0.0


class MarketNode:
    """
    Application orchestrator.

    Serializes submitted transactions onto the marketplace, one at a time,
    and owns the HTTP server.
    """

    __slots__ = (
        "_marketplace",
        "_lock",
        "_stats",
        "_running",
        "_shutdown_event",
        "_http_server",
        "_enable_http",
        "_http_host",
        "_http_port",
    )

    def __init__(
        self,
        marketplace: Marketplace | None = None,
        enable_http: bool = False,
        http_host: str = settings.HTTP_HOST,
        http_port: int = settings.HTTP_PORT,
    ) -> None:
        """Initialise node

        Args:
            marketplace: Marketplace to drive (default: fresh one on a new Host)
            enable_http: Whether to start HTTP server (default = False)
            http_host: Host for HTTP server
            http_port: Port for HTTP server
        """
        self._marketplace = marketplace or Marketplace(Host())
        self._lock = asyncio.Lock()
        self._stats = NodeStats()

        self._enable_http = enable_http
        self._http_host = http_host
        self._http_port = http_port
        self._http_server: HTTPServer | None = None

        self._running = False
        self._shutdown_event = asyncio.Event()

    @property
    def is_running(self) -> bool:
        "Whether the node is currently running"
        return self._running

    @property
    def marketplace(self) -> Marketplace:
        return self._marketplace

    async def start(self) -> None:
        if self._running:
            logger.warning("Node already running")
            return

        logger.info("Starting marketplace node...")

        if self._enable_http:
            self._http_server = HTTPServer(
                node=self,
                host=self._http_host,
                port=self._http_port,
            )
            await self._http_server.start()

        self._running = True
        logger.info("✓ Marketplace node started")

    async def stop(self) -> None:
        if not self._running:
            logger.warning("Node not running")
            return

        logger.info("Stopping marketplace node...")

        if self._http_server:
            try:
                await self._http_server.stop()
            except Exception as e:
                logger.error(f"Error stopping HTTP server: {e}")
            self._http_server = None

        self._running = False
        logger.info("✓ Marketplace node stopped")

    async def run(self) -> None:
        """
        Run node with automatic signal handling.

        Blocks until SIGINT or SIGTERM received, then gracefully stops.
        """
        loop = asyncio.get_running_loop()

        def signal_handler(*args, **kwargs) -> None:
            logger.info("Shutdown signal received")
            self._shutdown_event.set()

        signals = (signal.SIGINT, signal.SIGTERM)
        for sig in signals:
            loop.add_signal_handler(sig, signal_handler)

        try:
            await self.start()
            await self._shutdown_event.wait()
        finally:
            await self.stop()

            for sig in signals:
                loop.remove_signal_handler(sig)

    def shutdown(self) -> None:
        self._shutdown_event.set()

    # ---------------------------
    # Transaction submission
    # ---------------------------

    async def submit(self, tx: Transaction) -> TxReceipt:
        """
        Execute one transaction and report its outcome.

        Marketplace aborts become failed receipts; anything else propagates.
        """
        tx_id = generate_tx_id()
        kind = type(tx).__struct_config__.tag

        async with self._lock:
            with bind_transaction(tx_id, kind, tx.sender):
                timer = Timer(logger=None)
                timer.start()
                try:
                    result = self._dispatch(tx)
                except MarketError as e:
                    return TxReceipt(
                        ok=False,
                        kind=kind,
                        tx_id=tx_id,
                        code=e.code.value,
                        error=str(e),
                    )
                finally:
                    self._stats.submitted += 1
                    self._stats.processing_time_ms += timer.stop() * 1000

        return TxReceipt(ok=True, kind=kind, tx_id=tx_id, result=result)

    def _dispatch(self, tx: Transaction) -> Any:
        market = self._marketplace

        match tx:
            case Initialize():
                market.initialize(tx.sender)
                return None
            case Mint():
                return market.mint(
                    tx.sender, tx.name, tx.description, tx.uri, tx.rarity
                )
            case StartAuction():
                auction = market.start_auction(
                    tx.sender,
                    tx.account,
                    tx.asset_id,
                    tx.starting_price,
                    tx.duration,
                )
                return AuctionView.from_auction(auction)
            case PlaceBid():
                receipt = market.place_bid(
                    tx.sender, tx.account, tx.asset_id, tx.amount
                )
                return receipt._asdict()
            case EndAuction():
                return market.end_auction(tx.sender, tx.account, tx.asset_id)._asdict()
            case TransferOwnership():
                market.transfer_ownership(
                    tx.sender, tx.account, tx.asset_id, tx.new_owner
                )
                return None
            case SetPrice():
                market.set_price(tx.sender, tx.account, tx.asset_id, tx.price)
                return None
            case ListForSale():
                market.list_for_sale(tx.sender, tx.account, tx.asset_id, tx.price)
                return None
            case Purchase():
                return market.purchase(
                    tx.sender, tx.account, tx.asset_id, tx.payment
                )._asdict()
            case _:
                assert_never(tx)

    # ---------------------------
    # Health and stats
    # ---------------------------

    def get_stats(self) -> dict[str, Any]:
        """
        Get node statistics.

        Returns:
            dict with keys: running, node, market, registries
        """
        state = self._marketplace.host.state

        return {
            "running": self._running,
            "node": {
                "submitted": self._stats.submitted,
                "avg_processing_time_ms": self._stats.avg_processing_time_ms,
            },
            "market": self._marketplace.stats.as_dict(),
            "registries": {
                "count": len(state.registries),
                "assets": sum(len(registry) for registry in state.registries),
                "listed": sum(
                    1
                    for registry in state.registries
                    for asset in registry
                    if asset.for_sale
                ),
                "open_auctions": sum(
                    1
                    for registry in state.registries
                    for asset in registry
                    if asset.has_auction
                ),
            },
        }

    def is_healthy(self) -> bool:
        return self._running
