"""Infrastructure layer - cross-cutting concerns."""

from bdb_handles.infrastructure.config import Config, get_config
from bdb_handles.infrastructure.engine_registry import (
    create_engine,
    get_engine,
    reset_engine,
    set_engine,
)
from bdb_handles.infrastructure.logging import configure_library_defaults, setup_logging, get_logger
from bdb_handles.infrastructure.metrics import setup_metrics, get_metrics, MetricsRegistry
from bdb_handles.infrastructure.tracing import setup_tracing, get_tracer

__all__ = [
    "Config",
    "get_config",
    "create_engine",
    "get_engine",
    "set_engine",
    "reset_engine",
    "configure_library_defaults",
    "setup_logging",
    "get_logger",
    "setup_metrics",
    "get_metrics",
    "MetricsRegistry",
    "setup_tracing",
    "get_tracer",
]
