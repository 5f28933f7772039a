"""Prometheus metrics for the handle layer."""

from __future__ import annotations

from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    Info,
    start_http_server,
    REGISTRY,
    CollectorRegistry,
)

from bdb_handles.infrastructure.config import get_config


class MetricsRegistry:
    """Registry of all handle layer metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics registry."""
        self._registry = registry or REGISTRY

        # Engine call metrics
        self.engine_calls_total = Counter(
            "bdb_engine_calls_total",
            "Total number of storage engine calls",
            ["operation", "outcome"],  # outcome: ok, not_found, error
            registry=self._registry,
        )

        self.engine_call_latency_seconds = Histogram(
            "bdb_engine_call_latency_seconds",
            "Storage engine call latency in seconds",
            ["operation"],
            buckets=(0.00001, 0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0),
            registry=self._registry,
        )

        # Handle metrics
        self.handles_open = Gauge(
            "bdb_handles_open",
            "Number of live engine handles",
            ["kind"],  # database, environment, cursor
            registry=self._registry,
        )

        self.handle_rejections_total = Counter(
            "bdb_handle_rejections_total",
            "Operations rejected by the handle state guard",
            ["kind", "reason"],  # reason: closed, already_open
            registry=self._registry,
        )

        self.info = Info(
            "bdb_handles",
            "Handle layer information",
            registry=self._registry,
        )

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry


# Global metrics registry
_metrics: MetricsRegistry | None = None


def setup_metrics(
    port: int | None = None, registry: CollectorRegistry | None = None
) -> MetricsRegistry:
    """
    Set up Prometheus metrics server.

    Args:
        port: Port for the metrics HTTP server; the configured metrics_port
            if omitted
        registry: Optional custom registry

    Returns:
        The metrics registry
    """
    global _metrics
    _metrics = MetricsRegistry(registry)

    from bdb_handles import __version__
    config = get_config()
    _metrics.info.info({
        "version": __version__,
        "engine_backend": config.engine.backend,
    })

    start_http_server(port or config.observability.metrics_port, registry=registry or REGISTRY)

    return _metrics


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics
