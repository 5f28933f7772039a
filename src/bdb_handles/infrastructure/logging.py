"""Structured logging configuration.

Handle lifecycle transitions (created, opened, released) are logged at
DEBUG with the handle kind and state. Errors are never logged here; they
are raised to the caller.

Importing this module installs quiet structlog defaults (warnings and
above, to stderr) unless the host application configured structlog first.
"""

from __future__ import annotations

import logging
import sys
from enum import Enum
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from bdb_handles.infrastructure.config import get_config


def render_enums(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
    """Replace enum values (HandleState, DatabaseType, flags) with their names."""
    for key, value in event_dict.items():
        if isinstance(value, Enum):
            event_dict[key] = value.name
    return event_dict


def setup_logging(
    level: str | None = None,
    log_format: str | None = None,
) -> None:
    """
    Set up structured logging with structlog.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL); the
            configured observability level if omitted
        log_format: Log format ('json' or 'console'); the configured
            format if omitted
    """
    observability = get_config().observability
    log_level = getattr(logging, (level or observability.log_level).upper())
    log_format = log_format or observability.log_format

    # Engine adapters log through the standard library
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        render_enums,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=False),
        ]

    # Module loggers are bound at import time, before setup_logging runs
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


def configure_library_defaults() -> None:
    """Keep handle lifecycle events quiet until setup_logging() runs.

    Unconfigured structlog prints every level to stdout. Until the host
    application configures logging, only warnings and above are emitted,
    to stderr. Does nothing if structlog is already configured.
    """
    if structlog.is_configured():
        return
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            render_enums,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.WARNING),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None, **initial_context: Any) -> structlog.BoundLogger:
    """
    Get a bound logger instance.

    Args:
        name: Logger name (module name typically)
        **initial_context: Initial context to bind to the logger

    Returns:
        A bound structlog logger
    """
    logger = structlog.get_logger(name)
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger


configure_library_defaults()
