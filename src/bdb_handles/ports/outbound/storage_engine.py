"""Storage Engine port for the embedded key/value engine.

This outbound port defines the narrow, synchronous call interface the
handle layer uses to reach the storage engine. The engine owns page
layout, caching, durability and locking; none of that is visible here.

Every call returns an integer status code first:
- 0 means success
- a positive value is an errno
- a negative value is an engine-specific condition, including the
  reserved "not found" code exposed as ``not_found_code``

Calls that produce data return a tuple ``(status, *payload)``. Payload
bytes are always copied into fresh ``bytes`` objects by the adapter so
callers never see engine-owned buffers.

Handles are opaque. The handle layer never inspects them; it only hands
them back to the engine that produced them.

References:
    - Berkeley DB C API: db_create, DB->open, DB->close, DB->put, DB->get,
      DB->del, DB->cursor, DBC->get, DBC->close, db_env_create,
      DB_ENV->open, DB_ENV->close, db_strerror, db_version
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Any, Protocol

DbHandle = Any
"""Opaque engine database handle."""

EnvHandle = Any
"""Opaque engine environment handle."""

CursorHandle = Any
"""Opaque engine cursor handle."""

TxnHandle = Any
"""Opaque engine transaction handle (always None here)."""


class StorageEngine(Protocol):
    """Protocol for the storage engine call interface.

    Thread Safety:
        Distinct handles may be used from different threads. Calls on the
        same handle must be serialized by the caller.
    """

    @property
    @abstractmethod
    def not_found_code(self) -> int:
        """Return the status code the engine uses for absent keys."""
        ...

    # Database handles

    @abstractmethod
    def db_create(self, env: EnvHandle | None) -> tuple[int, DbHandle | None]:
        """Allocate a database handle, optionally inside an environment."""
        ...

    @abstractmethod
    def db_open(
        self,
        db: DbHandle,
        txn: TxnHandle | None,
        filename: str | None,
        dbtype: int,
        flags: int,
        mode: int,
    ) -> int:
        """Open a database file. ``mode`` 0 requests the engine default."""
        ...

    @abstractmethod
    def db_close(self, db: DbHandle, flags: int) -> int:
        """Close the database. The handle is invalid afterwards."""
        ...

    @abstractmethod
    def db_get_open_flags(self, db: DbHandle) -> tuple[int, int]:
        """Return the flags passed to db_open."""
        ...

    @abstractmethod
    def db_remove(self, db: DbHandle, filename: str) -> int:
        """Remove a database file. The handle is invalid afterwards."""
        ...

    @abstractmethod
    def db_rename(self, db: DbHandle, old_name: str, new_name: str) -> int:
        """Rename a database file. The handle is invalid afterwards."""
        ...

    @abstractmethod
    def db_put(self, db: DbHandle, key: bytes, value: bytes, flags: int) -> int:
        """Store a key/value pair."""
        ...

    @abstractmethod
    def db_get(self, db: DbHandle, key: bytes) -> tuple[int, bytes | None]:
        """Fetch the value for a key."""
        ...

    @abstractmethod
    def db_del(self, db: DbHandle, key: bytes) -> int:
        """Delete a key."""
        ...

    # Cursors

    @abstractmethod
    def db_cursor(self, db: DbHandle) -> tuple[int, CursorHandle | None]:
        """Create a cursor bound to the database handle."""
        ...

    @abstractmethod
    def cursor_get(
        self, cursor: CursorHandle, mode: int
    ) -> tuple[int, bytes | None, bytes | None]:
        """Reposition the cursor and return the key/value pair there."""
        ...

    @abstractmethod
    def cursor_close(self, cursor: CursorHandle) -> int:
        """Close the cursor."""
        ...

    # Environments

    @abstractmethod
    def env_create(self) -> tuple[int, EnvHandle | None]:
        """Allocate an environment handle."""
        ...

    @abstractmethod
    def env_open(self, env: EnvHandle, home: str, flags: int, mode: int) -> int:
        """Initialize the shared context rooted at ``home``."""
        ...

    @abstractmethod
    def env_close(self, env: EnvHandle, flags: int) -> int:
        """Close the environment."""
        ...

    # Utilities

    @abstractmethod
    def strerror(self, code: int) -> str:
        """Return the engine's description of a status code."""
        ...

    @abstractmethod
    def version(self) -> str:
        """Return the engine library version string."""
        ...
