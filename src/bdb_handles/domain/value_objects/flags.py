"""Engine flag, type, mode and status values.

The numeric values are the ones the Berkeley DB C library uses. They are
passed through to the storage engine verbatim and never reinterpreted by
the handle layer.
"""

from __future__ import annotations

from enum import IntEnum, IntFlag


class DatabaseType(IntEnum):
    """Access method of a database file."""

    BTREE = 1
    """Sorted, balanced tree. Cursors walk keys in ascending byte order."""

    HASH = 2
    """Extended linear hashing. Cursor order is engine-defined."""

    RECNO = 3
    """Record-number keyed, variable length records."""

    QUEUE = 4
    """Record-number keyed, fixed length records."""

    UNKNOWN = 5
    """Adopt the type stored in an existing file (open only)."""

    def is_record_based(self) -> bool:
        """Check if keys are record numbers rather than arbitrary bytes."""
        return self in (DatabaseType.RECNO, DatabaseType.QUEUE)


class OpenFlag(IntFlag):
    """Flags accepted by Database.open."""

    CREATE = 0x00000001
    EXCL = 0x00000004
    RDONLY = 0x00000400
    TRUNCATE = 0x00040000


class EnvironmentFlag(IntFlag):
    """Flags accepted by Environment.open.

    INIT_MPOOL shares its bit value with OpenFlag.RDONLY in the engine,
    so environment flags live in their own enumeration.
    """

    CREATE = 0x00000001
    INIT_MPOOL = 0x00000400


class CursorMode(IntEnum):
    """Cursor positioning modes."""

    FIRST = 7
    LAST = 15
    NEXT = 16
    PREV = 23


# Reserved engine status codes (errno values are used for everything else)
DB_SUCCESS = 0
DB_NOTFOUND = -30988
DB_KEYEXIST = -30995

# Engine-style aliases
DB_BTREE = DatabaseType.BTREE
DB_HASH = DatabaseType.HASH
DB_RECNO = DatabaseType.RECNO
DB_QUEUE = DatabaseType.QUEUE
DB_UNKNOWN = DatabaseType.UNKNOWN

DB_CREATE = OpenFlag.CREATE
DB_EXCL = OpenFlag.EXCL
DB_RDONLY = OpenFlag.RDONLY
DB_TRUNCATE = OpenFlag.TRUNCATE

DB_INIT_MPOOL = EnvironmentFlag.INIT_MPOOL

DB_FIRST = CursorMode.FIRST
DB_LAST = CursorMode.LAST
DB_NEXT = CursorMode.NEXT
DB_PREV = CursorMode.PREV

# Permission bits the engine uses when a caller passes mode 0
DEFAULT_FILE_MODE = 0o660
