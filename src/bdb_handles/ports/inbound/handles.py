"""Handle ports - the API offered to callers of the handle layer.

This inbound port defines the contracts for the three resource handles
(Database, Environment, Cursor) and the error taxonomy every handle
operation reports through.

Error taxonomy:

    HandleError
    ├── ClosedHandleError            operation on a terminal handle
    │   ├── DatabaseClosedError
    │   ├── EnvironmentClosedError
    │   └── CursorClosedError
    ├── AlreadyOpenError             second open() on the same handle
    └── EngineError                  nonzero engine status (code, message)
        └── NotFoundError            the engine's reserved "not found" status

Closed and already-open errors are raised before any engine call.
"""

from __future__ import annotations

from abc import abstractmethod
from pathlib import Path
from typing import Any, Iterator, Protocol, runtime_checkable

from bdb_handles.domain.value_objects import (
    CursorMode,
    DatabaseType,
    EnvironmentFlag,
    HandleState,
    OpenFlag,
)


class HandleError(Exception):
    """Base class for every error raised by the handle layer."""

    pass


class ClosedHandleError(HandleError):
    """Raised when an operation targets a closed, removed or renamed handle.

    No engine call is made. The caller can always recover by creating a
    new handle.
    """

    kind = "handle"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or f"{self.kind} is closed")


class DatabaseClosedError(ClosedHandleError):
    """Raised when a Database handle is used after close/remove/rename."""

    kind = "database"


class EnvironmentClosedError(ClosedHandleError):
    """Raised when an Environment handle is used after close."""

    kind = "environment"


class CursorClosedError(ClosedHandleError):
    """Raised when a Cursor is used after close or after its database closed."""

    kind = "cursor"


class AlreadyOpenError(HandleError):
    """Raised when open() is called on a handle that recorded an open attempt.

    The attempt is recorded whether or not the first open() succeeded.
    """

    def __init__(self, kind: str) -> None:
        super().__init__(f"{kind} has already been opened")
        self.kind = kind


class EngineError(HandleError):
    """Raised for any nonzero status returned by the storage engine.

    Attributes:
        code: The raw engine status code.
        message: The engine's description of the code.
    """

    def __init__(self, code: int, message: str) -> None:
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message

    @property
    def is_not_found(self) -> bool:
        """True if the engine reported a missing key or an exhausted cursor."""
        return False


class NotFoundError(EngineError):
    """The engine's "not found" status.

    Raised by get/delete of an absent key and by cursor moves past either
    end of the sequence. Still an EngineError carrying the raw code.
    """

    @property
    def is_not_found(self) -> bool:
        return True


# =============================================================================
# Handle contracts
# =============================================================================
#
# Environment, Database and Cursor in the application layer implement these.


@runtime_checkable
class EnvironmentPort(Protocol):
    """Protocol for a shared engine environment handle."""

    @property
    @abstractmethod
    def state(self) -> HandleState:
        """Return the current lifecycle state."""
        ...

    @property
    @abstractmethod
    def is_closed(self) -> bool:
        """True once the environment has been closed."""
        ...

    @abstractmethod
    def open(self, home: str | Path, flags: EnvironmentFlag, mode: int = 0) -> None:
        """Initialize the shared context rooted at a home directory.

        Raises:
            EnvironmentClosedError: If the environment is closed.
            AlreadyOpenError: If open() was attempted before.
            EngineError: If the engine rejects the open.
        """
        ...

    @abstractmethod
    def close(self) -> None:
        """Close the environment. Attached databases are not closed.

        Raises:
            EnvironmentClosedError: If already closed.
            EngineError: If the engine reports a failure.
        """
        ...


@runtime_checkable
class DatabasePort(Protocol):
    """Protocol for a database handle."""

    @property
    @abstractmethod
    def state(self) -> HandleState:
        """Return the current lifecycle state."""
        ...

    @property
    @abstractmethod
    def is_closed(self) -> bool:
        """True once the handle was closed, removed or renamed."""
        ...

    @abstractmethod
    def open(
        self,
        filename: str | None,
        dbtype: DatabaseType = DatabaseType.BTREE,
        flags: OpenFlag = OpenFlag(0),
        mode: int = 0,
        txn: Any | None = None,
    ) -> None:
        """Open the backing file with the given access method and flags.

        Raises:
            DatabaseClosedError: If the handle is terminal.
            AlreadyOpenError: If open() was attempted before.
            EngineError: If the engine rejects the open.
        """
        ...

    @abstractmethod
    def close(self) -> None:
        """Close the database and release the engine handle."""
        ...

    @abstractmethod
    def flags(self) -> OpenFlag:
        """Return the flags the database was opened with."""
        ...

    @abstractmethod
    def remove(self, filename: str) -> None:
        """Remove the named database file. The handle is consumed."""
        ...

    @abstractmethod
    def rename(self, old_name: str, new_name: str) -> None:
        """Rename the backing file. The handle is consumed."""
        ...

    @abstractmethod
    def put(self, key: bytes, value: bytes) -> None:
        """Store a key/value pair."""
        ...

    @abstractmethod
    def get(self, key: bytes) -> bytes:
        """Fetch the value stored under key.

        Raises:
            NotFoundError: If the key is absent.
        """
        ...

    @abstractmethod
    def delete(self, key: bytes) -> None:
        """Delete the pair stored under key.

        Raises:
            NotFoundError: If the key is absent.
        """
        ...

    @abstractmethod
    def cursor(self) -> CursorPort:
        """Create a cursor over this database."""
        ...

    @abstractmethod
    def items(self) -> Iterator[tuple[bytes, bytes]]:
        """Yield every pair in cursor order."""
        ...


@runtime_checkable
class CursorPort(Protocol):
    """Protocol for a cursor handle."""

    @property
    @abstractmethod
    def state(self) -> HandleState:
        """Return the current lifecycle state."""
        ...

    @property
    @abstractmethod
    def is_closed(self) -> bool:
        """True once the cursor has been closed."""
        ...

    @property
    @abstractmethod
    def database(self) -> DatabasePort:
        """Return the database the cursor was created from."""
        ...

    @abstractmethod
    def move(self, mode: CursorMode) -> tuple[bytes, bytes]:
        """Reposition the cursor and return the pair at the new position.

        Raises:
            CursorClosedError: If the cursor or its database is closed.
            NotFoundError: When the move runs off either end.
        """
        ...

    @abstractmethod
    def close(self) -> None:
        """Close the cursor and release the engine handle."""
        ...

    @abstractmethod
    def __iter__(self) -> Iterator[tuple[bytes, bytes]]:
        """Iterate forward from the current position until exhausted."""
        ...

    @abstractmethod
    def __enter__(self) -> CursorPort:
        ...

    @abstractmethod
    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Close the cursor if it is still open."""
        ...
