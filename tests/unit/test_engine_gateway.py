"""Unit tests for EngineGateway."""

from __future__ import annotations

import errno

import pytest

from bdb_handles.adapters.outbound import FileStorageEngine
from bdb_handles.application import EngineGateway
from bdb_handles.domain.value_objects import DB_NOTFOUND, DatabaseType, OpenFlag
from bdb_handles.infrastructure.metrics import MetricsRegistry
from bdb_handles.ports.inbound.handles import EngineError, NotFoundError


def sample(metrics: MetricsRegistry, name: str, **labels: str) -> float:
    value = metrics.registry.get_sample_value(name, labels)
    return value or 0.0


@pytest.mark.unit
class TestEngineGateway:
    """Tests for payload unpacking, translation and metrics."""

    @pytest.fixture
    def gateway(
        self, engine: FileStorageEngine, metrics_registry: MetricsRegistry
    ) -> EngineGateway:
        return EngineGateway(engine, metrics_registry)

    def test_status_only_returns_none(self, gateway: EngineGateway) -> None:
        assert gateway.call("noop", lambda: 0) is None

    def test_single_payload_unwrapped(self, gateway: EngineGateway) -> None:
        assert gateway.call("read", lambda: (0, b"value")) == b"value"

    def test_multi_payload_tuple(self, gateway: EngineGateway) -> None:
        assert gateway.call("move", lambda: (0, b"k", b"v")) == (b"k", b"v")

    def test_arguments_forwarded(self, gateway: EngineGateway) -> None:
        assert gateway.call("add", lambda a, b: (0, a + b), 2, 3) == 5

    def test_not_found_raised(self, gateway: EngineGateway) -> None:
        with pytest.raises(NotFoundError):
            gateway.call("read", lambda: (DB_NOTFOUND, None))

    def test_error_raised(self, gateway: EngineGateway) -> None:
        with pytest.raises(EngineError) as exc_info:
            gateway.call("write", lambda: errno.EACCES)
        assert exc_info.value.code == errno.EACCES

    def test_engine_exceptions_propagate(self, gateway: EngineGateway) -> None:
        def boom() -> int:
            raise RuntimeError("engine crashed")

        with pytest.raises(RuntimeError, match="engine crashed"):
            gateway.call("boom", boom)

    def test_outcome_metrics(
        self, gateway: EngineGateway, metrics_registry: MetricsRegistry
    ) -> None:
        gateway.call("op", lambda: 0)
        with pytest.raises(NotFoundError):
            gateway.call("op", lambda: DB_NOTFOUND)
        with pytest.raises(EngineError):
            gateway.call("op", lambda: errno.EINVAL)

        for outcome in ("ok", "not_found", "error"):
            assert sample(
                metrics_registry, "bdb_engine_calls_total", operation="op", outcome=outcome
            ) == 1.0
        assert sample(
            metrics_registry, "bdb_engine_call_latency_seconds_count", operation="op"
        ) == 3.0

    def test_real_engine_call(
        self, gateway: EngineGateway, engine: FileStorageEngine
    ) -> None:
        db = gateway.call("db_create", engine.db_create, None)
        gateway.call(
            "db_open", engine.db_open, db, None, None, int(DatabaseType.HASH), int(OpenFlag.CREATE), 0
        )
        gateway.call("db_put", engine.db_put, db, b"k", b"v", 0)

        assert gateway.call("db_get", engine.db_get, db, b"k") == b"v"


@pytest.mark.unit
class TestHandleMetrics:
    """Tests for handle gauges and rejection counters."""

    def test_handle_gauge(self, engine: FileStorageEngine, metrics_registry: MetricsRegistry) -> None:
        gateway = EngineGateway(engine, metrics_registry)

        gateway.handle_acquired("database")
        gateway.handle_acquired("database")
        gateway.handle_released("database")

        assert sample(metrics_registry, "bdb_handles_open", kind="database") == 1.0

    def test_rejections(self, engine: FileStorageEngine, metrics_registry: MetricsRegistry) -> None:
        gateway = EngineGateway(engine, metrics_registry)

        gateway.rejected("cursor", "closed")

        assert sample(
            metrics_registry, "bdb_handle_rejections_total", kind="cursor", reason="closed"
        ) == 1.0
