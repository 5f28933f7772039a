"""OpenTelemetry tracing configuration.

Every storage engine call runs inside an ``engine.<operation>`` span
(see engine_span). The tracer provider is only installed by
setup_tracing(); until then spans go to the no-op provider.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Generator

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

from bdb_handles.infrastructure.config import get_config


_tracer: trace.Tracer | None = None


def setup_tracing(
    service_name: str | None = None,
    otlp_endpoint: str | None = None,
    console_export: bool = False,
) -> trace.Tracer:
    """
    Set up OpenTelemetry tracing.

    Args:
        service_name: Name of the service for tracing; the configured
            otel_service_name if omitted
        otlp_endpoint: OTLP collector endpoint (e.g., "http://localhost:4317");
            the configured otel_endpoint if omitted
        console_export: Whether to also export to console (for debugging)

    Returns:
        Configured tracer instance
    """
    global _tracer

    from bdb_handles import __version__

    config = get_config()
    service_name = service_name or config.observability.otel_service_name
    otlp_endpoint = otlp_endpoint or config.observability.otel_endpoint

    resource = Resource.create(
        {
            "service.name": service_name,
            "service.version": __version__,
            "bdb.engine.backend": config.engine.backend,
        }
    )

    provider = TracerProvider(resource=resource)

    if otlp_endpoint:
        otlp_exporter = OTLPSpanExporter(endpoint=otlp_endpoint, insecure=True)
        provider.add_span_processor(BatchSpanProcessor(otlp_exporter))

    if console_export:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)

    _tracer = trace.get_tracer(service_name)

    return _tracer


def get_tracer() -> trace.Tracer:
    """Get the global tracer instance."""
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer("bdb_handles")
    return _tracer


@contextmanager
def trace_span(
    name: str,
    attributes: dict[str, Any] | None = None,
) -> Generator[trace.Span, None, None]:
    """
    Context manager for creating a trace span.

    Args:
        name: Name of the span
        attributes: Optional attributes to add to the span

    Yields:
        The created span
    """
    tracer = get_tracer()
    with tracer.start_as_current_span(name) as span:
        if attributes:
            for key, value in attributes.items():
                span.set_attribute(key, value)
        yield span


@contextmanager
def engine_span(operation: str, engine: str) -> Generator[trace.Span, None, None]:
    """
    Span around one storage engine call.

    Args:
        operation: Engine call name (e.g. "db_put")
        engine: Engine adapter name

    Yields:
        The created span; the caller records the returned status on it
    """
    with trace_span(
        f"engine.{operation}",
        {"db.system": "berkeleydb", "db.operation": operation, "bdb.engine": engine},
    ) as span:
        yield span
