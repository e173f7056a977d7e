"""Prometheus metrics for fixture runs."""

from __future__ import annotations

from prometheus_client import (
    Counter,
    Histogram,
    Info,
    start_http_server,
    REGISTRY,
    CollectorRegistry,
)

from sensor_fixtures import __version__


class MetricsRegistry:
    """Registry of all fixture generator metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics registry."""
        self._registry = registry or REGISTRY

        # Load metrics
        self.rows_written_total = Counter(
            "fixture_rows_written_total",
            "Total rows committed to the target",
            ["table", "strategy"],
            registry=self._registry,
        )

        self.batches_total = Counter(
            "fixture_batches_total",
            "Transaction batches by outcome",
            ["strategy", "status"],  # status: committed, failed
            registry=self._registry,
        )

        self.load_duration_seconds = Histogram(
            "fixture_load_duration_seconds",
            "Wall time of the load phase",
            ["strategy", "backend"],
            buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0, 30.0, 60.0, 300.0, 900.0),
            registry=self._registry,
        )

        # Index metrics
        self.index_build_duration_seconds = Histogram(
            "fixture_index_build_duration_seconds",
            "Wall time of index construction and ANALYZE",
            buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0, 30.0, 60.0),
            registry=self._registry,
        )

        # Verification metrics
        self.verification_checks_total = Counter(
            "fixture_verification_checks_total",
            "Verification checks by result",
            ["check", "result"],  # result: passed, failed
            registry=self._registry,
        )

        self.info = Info(
            "sensor_fixtures",
            "Fixture generator information",
            registry=self._registry,
        )


# Global metrics registry
_metrics: MetricsRegistry | None = None


def setup_metrics(port: int = 8001, registry: CollectorRegistry | None = None) -> MetricsRegistry:
    """
    Set up the Prometheus scrape endpoint.

    Args:
        port: Port for the metrics HTTP server
        registry: Optional custom registry

    Returns:
        The metrics registry
    """
    global _metrics
    _metrics = MetricsRegistry(registry)
    _metrics.info.info({
        "version": __version__,
    })

    start_http_server(port, registry=registry or REGISTRY)

    return _metrics


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics
