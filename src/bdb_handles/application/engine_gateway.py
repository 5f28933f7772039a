"""Engine gateway - the single funnel between handles and the engine.

Every engine call made by a Database, Environment or Cursor goes through
EngineGateway.call(), which:

1. runs the call inside an ``engine.<operation>`` trace span
2. records latency and outcome metrics
3. hands the status code to the ErrorTranslator, raising on failure
4. returns the payload of read calls

The gateway never retries and never swallows an error.
"""

from __future__ import annotations

import time
from typing import Any, Callable

from bdb_handles.domain.services import ErrorTranslator
from bdb_handles.infrastructure.metrics import MetricsRegistry, get_metrics
from bdb_handles.infrastructure.tracing import engine_span
from bdb_handles.ports.outbound.storage_engine import StorageEngine


class EngineGateway:
    """Instrumented, translating access to one storage engine."""

    def __init__(
        self,
        engine: StorageEngine,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            engine: The storage engine to forward to.
            metrics: Metrics registry (global one if omitted).
        """
        self._engine = engine
        self._translator = ErrorTranslator(engine)
        self._metrics = metrics or get_metrics()
        self._engine_name = type(engine).__name__

    @property
    def engine(self) -> StorageEngine:
        return self._engine

    @property
    def translator(self) -> ErrorTranslator:
        return self._translator

    @property
    def metrics(self) -> MetricsRegistry:
        return self._metrics

    def call(self, operation: str, func: Callable[..., Any], *args: Any) -> Any:
        """Invoke one engine call and translate its status.

        Args:
            operation: Engine call name, used for spans and metrics.
            func: Bound engine method.
            *args: Arguments for the engine method.

        Returns:
            None for status-only calls, the single payload item for calls
            returning ``(status, item)``, otherwise the payload tuple.

        Raises:
            EngineError: For any nonzero status (NotFoundError for the
                engine's "not found" code).
        """
        start = time.perf_counter()
        with engine_span(operation, self._engine_name) as span:
            result = func(*args)
            if isinstance(result, tuple):
                status, payload = result[0], result[1:]
            else:
                status, payload = result, ()
            span.set_attribute("bdb.status", status)
        elapsed = time.perf_counter() - start

        if status == 0:
            outcome = "ok"
        elif self._translator.is_not_found(status):
            outcome = "not_found"
        else:
            outcome = "error"
        self._metrics.engine_call_latency_seconds.labels(operation=operation).observe(elapsed)
        self._metrics.engine_calls_total.labels(operation=operation, outcome=outcome).inc()

        self._translator.check(status)

        if not payload:
            return None
        if len(payload) == 1:
            return payload[0]
        return payload

    def handle_acquired(self, kind: str) -> None:
        self._metrics.handles_open.labels(kind=kind).inc()

    def handle_released(self, kind: str) -> None:
        self._metrics.handles_open.labels(kind=kind).dec()

    def rejected(self, kind: str, reason: str) -> None:
        self._metrics.handle_rejections_total.labels(kind=kind, reason=reason).inc()
