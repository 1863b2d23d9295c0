"""Tests for Prometheus metrics collection."""

from unittest.mock import MagicMock

import pytest
from prometheus_client.parser import text_string_to_metric_families

from nftmarket.metrics.prometheus import MetricsCollector


@pytest.fixture
def mock_stats() -> dict:
    """Mock stats dictionary matching MarketNode.get_stats() structure."""
    return {
        "running": True,
        "node": {
            "submitted": 12,
            "avg_processing_time_ms": 0.25,
        },
        "market": {
            "committed": 10,
            "aborted": 2,
            "abort_ratio": 2 / 12,
            "committed_by_kind": {"mint": 4, "purchase": 2, "place_bid": 4},
            "aborted_by_code": {"bid_too_low": 2},
            "assets_minted": 4,
            "sales": 2,
            "bids": 4,
            "settlements": 1,
            "sale_volume": 900,
            "fees_paid": 30,
        },
        "registries": {
            "count": 2,
            "assets": 4,
            "listed": 1,
            "open_auctions": 1,
        },
    }


def _collect(stats: dict) -> dict[str, float]:
    node = MagicMock()
    node.get_stats.return_value = stats

    text = MetricsCollector(node).collect_metrics().decode("utf-8")

    samples: dict[str, float] = {}
    for family in text_string_to_metric_families(text):
        for sample in family.samples:
            labels = ",".join(f"{k}={v}" for k, v in sorted(sample.labels.items()))
            samples[f"{sample.name}{{{labels}}}"] = sample.value
    return samples


class TestMetricsCollector:
    def test_collect_metrics_returns_bytes(self, mock_stats: dict) -> None:
        node = MagicMock()
        node.get_stats.return_value = mock_stats

        result = MetricsCollector(node).collect_metrics()

        assert isinstance(result, bytes)
        assert len(result) > 0

    def test_node_metrics(self, mock_stats: dict) -> None:
        samples = _collect(mock_stats)

        assert samples["nftmarket_node_running{}"] == 1
        assert samples["nftmarket_transaction_processing_ms_avg{}"] == 0.25

    def test_transaction_counters_by_label(self, mock_stats: dict) -> None:
        samples = _collect(mock_stats)

        assert samples["nftmarket_transactions_committed_total{kind=mint}"] == 4
        assert samples["nftmarket_transactions_committed_total{kind=purchase}"] == 2
        assert samples["nftmarket_transactions_aborted_total{code=bid_too_low}"] == 2

    def test_market_metrics(self, mock_stats: dict) -> None:
        samples = _collect(mock_stats)

        assert samples["nftmarket_market_events_total{type=sales}"] == 2
        assert samples["nftmarket_market_events_total{type=settlements}"] == 1
        assert samples["nftmarket_sale_volume_total{}"] == 900
        assert samples["nftmarket_fees_paid_total{}"] == 30

    def test_registry_metrics(self, mock_stats: dict) -> None:
        samples = _collect(mock_stats)

        assert samples["nftmarket_registries{}"] == 2
        assert samples["nftmarket_assets{state=total}"] == 4
        assert samples["nftmarket_assets{state=in_auction}"] == 1

    def test_stopped_node_with_empty_sections(self) -> None:
        samples = _collect({"running": False, "node": {}})

        assert samples["nftmarket_node_running{}"] == 0
        assert not any(name.startswith("nftmarket_assets") for name in samples)
