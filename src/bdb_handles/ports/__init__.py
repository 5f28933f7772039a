"""Ports layer - interface definitions following Hexagonal Architecture.

Ports are abstract interfaces (protocols) that define contracts:
- Inbound ports: APIs offered to callers (Database, Environment, Cursor)
- Outbound ports: Dependencies on external systems (StorageEngine)

Adapters implement these ports with concrete functionality.
"""

from bdb_handles.ports.inbound import (
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
from bdb_handles.ports.outbound import StorageEngine

__all__ = [
    # Inbound ports
    "AlreadyOpenError",
    "ClosedHandleError",
    "CursorClosedError",
    "CursorPort",
    "DatabaseClosedError",
    "DatabasePort",
    "EngineError",
    "EnvironmentClosedError",
    "EnvironmentPort",
    "HandleError",
    "NotFoundError",
    # Outbound ports
    "StorageEngine",
]
