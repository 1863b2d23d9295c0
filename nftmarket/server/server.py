from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Final

import structlog
from aiohttp import web
from aiohttp.hdrs import CONTENT_TYPE
from prometheus_client import CONTENT_TYPE_LATEST

from nftmarket.core.config import settings
from nftmarket.core.errors import ErrorCode, InvalidTransactionError, MarketError
from nftmarket.core.logging import Logger
from nftmarket.messages.parser import TransactionParser
from nftmarket.messages.protocol import AssetView, AuctionView

if TYPE_CHECKING:
    from nftmarket.app import MarketNode

logger: Logger = structlog.getLogger(__name__)


# Codes not listed map to 400 Bad Request
_STATUS_BY_CODE: Final[dict[str, int]] = {
    ErrorCode.NOT_OWNER: 403,
    ErrorCode.ALREADY_INITIALIZED: 409,
    ErrorCode.AUCTION_EXISTS: 409,
    ErrorCode.ALREADY_LISTED: 409,
    ErrorCode.REGISTRY_NOT_FOUND: 404,
    ErrorCode.ASSET_NOT_FOUND: 404,
}

_parser = TransactionParser()


def status_for(code: str) -> int:
    """HTTP status for an aborted transaction or failed projection."""
    return _STATUS_BY_CODE.get(code, 400)


def _encoded(obj: Any, status: int = 200) -> web.Response:
    return web.Response(
        body=_parser.encode(obj),
        status=status,
        content_type="application/json",
    )


def _error(error: MarketError) -> web.Response:
    return web.json_response(
        {"code": error.code.value, "error": str(error)}, status=status_for(error.code)
    )


class HTTPServer:
    """
    HTTP server exposing transaction submission, projections, health, stats
    and metrics endpoints.
    """

    __slots__ = (
        "_node",
        "_port",
        "_host",
        "_runner",
        "_site",
        "_running",
    )

    def __init__(
        self,
        node: "MarketNode",
        port: int = 8080,
        host: str = "0.0.0.0",
    ) -> None:
        """Initialize HTTP server.

        Args:
            node: MarketNode that executes transactions and serves state
            port: Port to bind to (default: 8080)
            host: Host to bind to (default: 0.0.0.0 for container compatibility)
        """
        self._node = node
        self._port = port
        self._host = host
        self._runner: web.AppRunner | None = None
        self._site: web.TCPSite | None = None
        self._running = False

    def build_app(self) -> web.Application:
        web_app = web.Application()
        web_app.router.add_get("/health", self._handle_health)
        web_app.router.add_get("/stats", self._handle_stats)
        web_app.router.add_get("/metrics", self._handle_metrics)
        web_app.router.add_post("/transactions", self._handle_transaction)
        web_app.router.add_post("/faucet", self._handle_faucet)
        web_app.router.add_get("/accounts/{account}/balance", self._handle_balance)
        web_app.router.add_get("/registries/{account}", self._handle_registry)
        web_app.router.add_get(
            "/registries/{account}/assets/{asset_id:\\d+}", self._handle_asset
        )
        web_app.router.add_get(
            "/registries/{account}/assets/{asset_id:\\d+}/owner", self._handle_owner
        )
        web_app.router.add_get(
            "/registries/{account}/assets/{asset_id:\\d+}/auction",
            self._handle_auction,
        )
        web_app.router.add_get("/registries/{account}/for-sale", self._handle_for_sale)
        web_app.router.add_get(
            "/registries/{account}/rarity/{rarity:\\d+}", self._handle_rarity
        )
        return web_app

    async def start(self) -> None:
        """Start HTTP server.

        Raises:
            Exception: If server fails to start (port conflict, etc.)
        """
        if self._running:
            logger.warning("HTTP server already running")
            return

        logger.info(f"Starting HTTP server on {self._host}:{self._port}")

        self._runner = web.AppRunner(self.build_app())
        await self._runner.setup()

        self._site = web.TCPSite(
            self._runner,
            self._host,
            self._port,
        )
        await self._site.start()

        self._running = True
        logger.info(f"✓ HTTP server started on {self._host}:{self._port}")

    async def stop(self) -> None:
        """Stop HTTP server gracefully."""
        if not self._running:
            logger.warning("HTTP server not running")
            return

        logger.info("Stopping HTTP server...")

        self._running = False

        if self._site:
            await self._site.stop()
            self._site = None

        if self._runner:
            await self._runner.cleanup()
            self._runner = None

        logger.info("✓ HTTP server stopped")

    # ---------------------------
    # Operations
    # ---------------------------

    async def _handle_health(self, request: web.Request) -> web.Response:
        """Handle GET /health endpoint.

        Returns:
            200 OK when the node is running
            503 Service Unavailable otherwise
        """
        logger.debug("GET /health")

        is_healthy = self._node.is_healthy()
        response_data = {
            "healthy": is_healthy,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

        status = 200 if is_healthy else 503
        return web.json_response(response_data, status=status)

    async def _handle_stats(self, request: web.Request) -> web.Response:
        logger.debug("GET /stats")

        return web.json_response(self._node.get_stats(), status=200)

    async def _handle_metrics(self, request: web.Request) -> web.Response:
        """Handle GET /metrics endpoint.

        Returns:
            200 OK with Prometheus text exposition format
        """
        try:
            # Import here to avoid circular dependency
            from nftmarket.metrics.prometheus import MetricsCollector

            collector = MetricsCollector(self._node)
            metrics_bytes = collector.collect_metrics()

        except Exception as e:
            logger.exception(f"Error getting metrics: {e}")
            return web.json_response({"error": str(e)}, status=500)

        return web.Response(
            body=metrics_bytes,
            headers={CONTENT_TYPE: CONTENT_TYPE_LATEST},
        )

    # ---------------------------
    # Transactions
    # ---------------------------

    async def _handle_transaction(self, request: web.Request) -> web.Response:
        """Handle POST /transactions endpoint.

        Returns:
            200 OK with the receipt of a committed transaction
            400/403/404/409 with the receipt of an aborted one
            400 Bad Request when the body is not a valid transaction
        """
        body = await request.read()

        try:
            tx = _parser.parse_transaction(body)
        except InvalidTransactionError as e:
            return web.json_response(
                {"code": "invalid_transaction", "error": str(e)}, status=400
            )

        receipt = await self._node.submit(tx)
        if receipt.ok:
            return _encoded(receipt)

        return _encoded(receipt, status=status_for(receipt.code or ""))

    async def _handle_faucet(self, request: web.Request) -> web.Response:
        """Handle POST /faucet endpoint; credits new funds to an account."""
        if not settings.faucet_enabled:
            return web.json_response({"error": "Faucet disabled"}, status=403)

        try:
            funding = _parser.parse_funding(await request.read())
            balance = self._node.marketplace.fund(funding.account, funding.amount)
        except (InvalidTransactionError, ValueError) as e:
            return web.json_response(
                {"code": "invalid_transaction", "error": str(e)}, status=400
            )

        return web.json_response({"account": funding.account, "balance": balance})

    # ---------------------------
    # Projections
    # ---------------------------

    async def _handle_balance(self, request: web.Request) -> web.Response:
        account = request.match_info["account"]
        balance = self._node.marketplace.balance_of(account)
        return web.json_response({"account": account, "balance": balance})

    async def _handle_registry(self, request: web.Request) -> web.Response:
        account = request.match_info["account"]
        return web.json_response(
            {
                "account": account,
                "initialized": self._node.marketplace.is_initialized(account),
            }
        )

    async def _handle_asset(self, request: web.Request) -> web.Response:
        account = request.match_info["account"]
        asset_id = int(request.match_info["asset_id"])

        try:
            details = self._node.marketplace.get_details(account, asset_id)
        except MarketError as e:
            return _error(e)

        return _encoded(AssetView.from_details(details))

    async def _handle_owner(self, request: web.Request) -> web.Response:
        account = request.match_info["account"]
        asset_id = int(request.match_info["asset_id"])

        try:
            owner = self._node.marketplace.get_owner(account, asset_id)
        except MarketError as e:
            return _error(e)

        return web.json_response({"asset_id": asset_id, "owner": owner})

    async def _handle_auction(self, request: web.Request) -> web.Response:
        account = request.match_info["account"]
        asset_id = int(request.match_info["asset_id"])

        try:
            auction = self._node.marketplace.get_auction(account, asset_id)
        except MarketError as e:
            return _error(e)

        if auction is None:
            return web.json_response(
                {"code": "no_auction", "error": f"No auction open on asset {asset_id}"},
                status=404,
            )

        return _encoded(AuctionView.from_auction(auction))

    async def _handle_for_sale(self, request: web.Request) -> web.Response:
        account = request.match_info["account"]

        try:
            limit = int(request.query.get("limit", str(settings.PAGE_SIZE)))
            offset = int(request.query.get("offset", "0"))
        except ValueError:
            return web.json_response(
                {"error": "limit and offset must be integers"}, status=400
            )

        try:
            assets = self._node.marketplace.get_all_for_sale(account, limit, offset)
        except MarketError as e:
            return _error(e)

        return _encoded({"assets": [AssetView.from_asset(asset) for asset in assets]})

    async def _handle_rarity(self, request: web.Request) -> web.Response:
        account = request.match_info["account"]
        rarity = int(request.match_info["rarity"])

        try:
            asset_ids = self._node.marketplace.get_by_rarity(account, rarity)
        except MarketError as e:
            return _error(e)

        return web.json_response({"rarity": rarity, "asset_ids": asset_ids})
