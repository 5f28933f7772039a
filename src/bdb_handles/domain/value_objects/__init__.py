"""Value objects for the handle layer.

Value objects are immutable types that represent domain concepts.

Exports:
    Engine enumerations:
        - DatabaseType: Access methods (BTREE, HASH, RECNO, QUEUE, UNKNOWN)
        - OpenFlag: Database open flags (CREATE, EXCL, RDONLY, TRUNCATE)
        - EnvironmentFlag: Environment open flags (CREATE, INIT_MPOOL)
        - CursorMode: Cursor moves (FIRST, LAST, NEXT, PREV)

    Status codes:
        - DB_SUCCESS, DB_NOTFOUND, DB_KEYEXIST

    Handle states:
        - HandleState: Lifecycle states shared by all resource handles
"""

from bdb_handles.domain.value_objects.flags import (
    DB_BTREE,
    DB_CREATE,
    DB_EXCL,
    DB_FIRST,
    DB_HASH,
    DB_INIT_MPOOL,
    DB_KEYEXIST,
    DB_LAST,
    DB_NEXT,
    DB_NOTFOUND,
    DB_PREV,
    DB_QUEUE,
    DB_RDONLY,
    DB_RECNO,
    DB_SUCCESS,
    DB_TRUNCATE,
    DB_UNKNOWN,
    DEFAULT_FILE_MODE,
    CursorMode,
    DatabaseType,
    EnvironmentFlag,
    OpenFlag,
)
from bdb_handles.domain.value_objects.handle_state import HandleState

__all__ = [
    # Enumerations
    "CursorMode",
    "DatabaseType",
    "EnvironmentFlag",
    "OpenFlag",
    "HandleState",
    # Status codes
    "DB_SUCCESS",
    "DB_NOTFOUND",
    "DB_KEYEXIST",
    # Engine-style aliases
    "DB_BTREE",
    "DB_HASH",
    "DB_RECNO",
    "DB_QUEUE",
    "DB_UNKNOWN",
    "DB_CREATE",
    "DB_EXCL",
    "DB_RDONLY",
    "DB_TRUNCATE",
    "DB_INIT_MPOOL",
    "DB_FIRST",
    "DB_LAST",
    "DB_NEXT",
    "DB_PREV",
    "DEFAULT_FILE_MODE",
]
