"""Inbound ports - API contracts for the handle layer.

Inbound ports define the interfaces callers use to work with database,
environment and cursor handles, and the errors those handles raise.
"""

from bdb_handles.ports.inbound.handles import (
    AlreadyOpenError,
    ClosedHandleError,
    CursorClosedError,
    CursorPort,
    DatabaseClosedError,
    DatabasePort,
    EngineError,
    EnvironmentClosedError,
    EnvironmentPort,
    HandleError,
    NotFoundError,
)

__all__ = [
    # Handles
    "CursorPort",
    "DatabasePort",
    "EnvironmentPort",
    # Errors
    "AlreadyOpenError",
    "ClosedHandleError",
    "CursorClosedError",
    "DatabaseClosedError",
    "EngineError",
    "EnvironmentClosedError",
    "HandleError",
    "NotFoundError",
]
