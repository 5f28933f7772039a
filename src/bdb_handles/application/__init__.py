"""Application layer - the handle wrappers callers use.

Exports:
    - Database: Primary resource handle (open/put/get/delete/cursor)
    - Environment: Shared engine context for several databases
    - Cursor: Sequential positioning inside one database
    - EngineGateway: Instrumented, translating access to the engine
    - version(): Engine library version plus binding version
"""

from bdb_handles.application.cursor import Cursor
from bdb_handles.application.database import Database
from bdb_handles.application.engine_gateway import EngineGateway
from bdb_handles.application.environment import Environment
from bdb_handles.infrastructure.engine_registry import get_engine
from bdb_handles.ports.outbound.storage_engine import StorageEngine


def version(engine: StorageEngine | None = None) -> str:
    """Return the engine library version and the binding version."""
    from bdb_handles import __version__

    engine = engine or get_engine()
    return f"{engine.version()} (Python bindings v{__version__})"


__all__ = [
    "Cursor",
    "Database",
    "EngineGateway",
    "Environment",
    "version",
]
