"""Prometheus metrics collector for marketplace node stats.

Counters are rebuilt from the running totals in MarketStats on every
scrape, so a fresh CollectorRegistry is populated each time rather than
incrementing long-lived metric objects.

Example PromQL queries:
- Abort rate: rate(nftmarket_transactions_aborted_total[5m])
- Fee income: increase(nftmarket_fees_paid_total[1h])
"""

from typing import TYPE_CHECKING, Any

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    generate_latest,
)

if TYPE_CHECKING:
    from nftmarket.app import MarketNode


class MetricsCollector:
    """
    Collects node statistics and exposes them as Prometheus metrics.

    Generates fresh metrics on each collection by calling node.get_stats()
    and transforming the results into Prometheus format.
    """

    def __init__(self, node: "MarketNode") -> None:
        self._node = node

    def collect_metrics(self) -> bytes:
        """
        Collect current stats and return Prometheus text format.

        Returns:
            Prometheus text exposition format bytes
        """
        registry = CollectorRegistry()

        stats = self._node.get_stats()

        self._collect_node_metrics(registry, stats)
        self._collect_transaction_metrics(registry, stats)
        self._collect_market_metrics(registry, stats)
        self._collect_registry_metrics(registry, stats)

        return generate_latest(registry)

    def _collect_node_metrics(
        self, registry: CollectorRegistry, stats: dict[str, Any]
    ) -> None:
        """Collect node-level metrics."""
        running = Gauge(
            "nftmarket_node_running",
            "Whether the node is running (1) or stopped (0)",
            registry=registry,
        )
        running.set(1 if stats.get("running") else 0)

        node_stats = stats.get("node", {})
        processing = Gauge(
            "nftmarket_transaction_processing_ms_avg",
            "Average transaction processing time in milliseconds",
            registry=registry,
        )
        processing.set(node_stats.get("avg_processing_time_ms", 0.0))

    def _collect_transaction_metrics(
        self, registry: CollectorRegistry, stats: dict[str, Any]
    ) -> None:
        """Collect committed/aborted transaction counters."""
        market_stats = stats.get("market", {})
        if not market_stats:
            return

        committed = Counter(
            "nftmarket_transactions_committed",
            "Committed transactions by kind",
            ["kind"],
            registry=registry,
        )
        for kind, count in market_stats.get("committed_by_kind", {}).items():
            committed.labels(kind=kind)._value.set(count)

        aborted = Counter(
            "nftmarket_transactions_aborted",
            "Aborted transactions by error code",
            ["code"],
            registry=registry,
        )
        for code, count in market_stats.get("aborted_by_code", {}).items():
            aborted.labels(code=code)._value.set(count)

    def _collect_market_metrics(
        self, registry: CollectorRegistry, stats: dict[str, Any]
    ) -> None:
        """Collect sale, bid and fee totals."""
        market_stats = stats.get("market", {})
        if not market_stats:
            return

        events = Counter(
            "nftmarket_market_events",
            "Marketplace events by type",
            ["type"],
            registry=registry,
        )
        for event in ("assets_minted", "sales", "bids", "settlements"):
            events.labels(type=event)._value.set(market_stats.get(event, 0))

        volume = Counter(
            "nftmarket_sale_volume",
            "Total value of completed sales and settlements",
            registry=registry,
        )
        volume._value.set(market_stats.get("sale_volume", 0))

        fees_paid = Counter(
            "nftmarket_fees_paid",
            "Total marketplace fees paid",
            registry=registry,
        )
        fees_paid._value.set(market_stats.get("fees_paid", 0))

    def _collect_registry_metrics(
        self, registry: CollectorRegistry, stats: dict[str, Any]
    ) -> None:
        """Collect registry size metrics."""
        registry_stats = stats.get("registries", {})
        if not registry_stats:
            return

        registries = Gauge(
            "nftmarket_registries",
            "Number of initialized registries",
            registry=registry,
        )
        registries.set(registry_stats.get("count", 0))

        assets = Gauge(
            "nftmarket_assets",
            "Number of assets by state",
            ["state"],
            registry=registry,
        )
        assets.labels(state="total").set(registry_stats.get("assets", 0))
        assets.labels(state="listed").set(registry_stats.get("listed", 0))
        assets.labels(state="in_auction").set(registry_stats.get("open_auctions", 0))
