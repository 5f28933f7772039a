"""Database - the primary resource handle.

A Database owns one engine database handle from creation until the
first of close(), remove() or rename(). It can be opened exactly once;
a failed open still uses up that attempt, so retrying needs a new
Database.

Usage:
    from bdb_handles.application import Database
    from bdb_handles.domain.value_objects import DatabaseType, OpenFlag

    with Database.create() as db:
        db.open("/path/to/data.db", DatabaseType.HASH, OpenFlag.CREATE)
        db.put(b"key", b"value")
        assert db.get(b"key") == b"value"

        with db.cursor() as cursor:
            for key, value in cursor:
                ...

Keys and values are raw bytes; callers choose the encoding.
"""

from __future__ import annotations

import weakref
from typing import TYPE_CHECKING, Iterator

from bdb_handles.application.cursor import Cursor
from bdb_handles.application.engine_gateway import EngineGateway
from bdb_handles.application.managed_handle import ManagedHandle, as_bytes
from bdb_handles.domain.value_objects import DatabaseType, HandleState, OpenFlag
from bdb_handles.infrastructure.engine_registry import get_engine
from bdb_handles.infrastructure.metrics import MetricsRegistry
from bdb_handles.ports.inbound.handles import (
    CursorPort,
    DatabaseClosedError,
    EnvironmentPort,
    NotFoundError,
)
from bdb_handles.ports.outbound.storage_engine import StorageEngine, TxnHandle

if TYPE_CHECKING:
    from bdb_handles.application.environment import Environment


class Database(ManagedHandle):
    """Wrapper around one engine database handle.

    Thread Safety:
        None. One logical owner at a time; serialize externally if a
        Database is shared between threads.
    """

    kind = "database"
    closed_error = DatabaseClosedError

    def __init__(
        self,
        environment: Environment | None = None,
        engine: StorageEngine | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        """Allocate the engine database handle.

        Args:
            environment: Optional open Environment to create the database in.
                Its engine is used and only a weak reference is kept.
            engine: Storage engine when no environment is given (the
                global default if omitted). With an environment it must
                be the environment's engine or None.
            metrics: Metrics registry (the global one if omitted).

        Raises:
            ValueError: If engine and environment disagree.
            EnvironmentClosedError: If the environment is closed.
            EngineError: If the engine cannot allocate the handle.
        """
        if environment is not None and engine is not None and engine is not environment.engine:
            raise ValueError("engine must match the environment's engine")
        if environment is not None:
            env_handle = environment._attach()
            engine = environment.engine
        else:
            env_handle = None
            engine = engine or get_engine()

        gateway = EngineGateway(engine, metrics)
        handle = gateway.call("db_create", engine.db_create, env_handle)
        super().__init__(handle, gateway)
        self._environment = weakref.ref(environment) if environment is not None else None
        self._filename: str | None = None

    @classmethod
    def create(
        cls,
        environment: Environment | None = None,
        engine: StorageEngine | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> Database:
        return cls(environment=environment, engine=engine, metrics=metrics)

    @classmethod
    def create_in_environment(
        cls,
        environment: Environment,
        metrics: MetricsRegistry | None = None,
    ) -> Database:
        """Create a database that shares an open environment's context."""
        return cls(environment=environment, metrics=metrics)

    @property
    def engine(self) -> StorageEngine:
        return self._gateway.engine

    @property
    def environment(self) -> EnvironmentPort | None:
        """The environment this database was created in, if still alive."""
        if self._environment is None:
            return None
        return self._environment()

    @property
    def filename(self) -> str | None:
        """File name of a successful open(), None otherwise or when unnamed."""
        return self._filename

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def open(
        self,
        filename: str | None,
        dbtype: DatabaseType = DatabaseType.BTREE,
        flags: OpenFlag = OpenFlag(0),
        mode: int = 0,
        txn: TxnHandle | None = None,
    ) -> None:
        """Open the backing file.

        Args:
            filename: Path of the file, relative to the environment home
                when created in one. None or "" opens an unnamed
                in-memory database.
            dbtype: Access method.
            flags: Any of CREATE, EXCL, RDONLY, TRUNCATE.
            mode: Permission bits for a newly created file; 0 requests
                the engine default (0o660 before the umask).
            txn: Engine transaction handle, passed through untouched.
                Engines without transaction support reject anything but
                None with EINVAL.

        Raises:
            DatabaseClosedError: If the handle is terminal.
            AlreadyOpenError: If open() was attempted before.
            EngineError: If the engine rejects the open. The handle still
                counts as opened and must be closed.
        """
        handle = self._begin_open()
        self._gateway.call(
            "db_open",
            self.engine.db_open,
            handle,
            txn,
            filename or None,
            int(dbtype),
            int(flags),
            mode,
        )
        self._filename = filename or None

    def open_with_mode(
        self,
        filename: str | None,
        dbtype: DatabaseType,
        flags: OpenFlag,
        mode: int,
    ) -> None:
        """Open the backing file with explicit permission bits."""
        self.open(filename, dbtype, flags, mode)

    def open_with_txn(
        self,
        filename: str | None,
        txn: TxnHandle | None,
        dbtype: DatabaseType,
        flags: OpenFlag,
    ) -> None:
        """Open the backing file inside an engine transaction."""
        self.open(filename, dbtype, flags, txn=txn)

    def close(self) -> None:
        """Close the database. The handle is gone even if the engine fails.

        Raises:
            DatabaseClosedError: If the handle is already terminal.
            EngineError: If the engine reports a failure.
        """
        handle = self._release(HandleState.CLOSED)
        self._gateway.call("db_close", self.engine.db_close, handle, 0)

    def remove(self, filename: str) -> None:
        """Remove a database file through this (unopened) handle.

        The engine only allows this before open(). The handle is consumed
        either way.

        Raises:
            DatabaseClosedError: If the handle is terminal.
            EngineError: If the engine refuses or the file is missing.
        """
        handle = self._release(HandleState.REMOVED)
        self._gateway.call("db_remove", self.engine.db_remove, handle, filename)

    def rename(self, old_name: str, new_name: str) -> None:
        """Rename a database file through this (unopened) handle.

        The engine only allows this before open(). The handle is consumed
        either way.

        Raises:
            DatabaseClosedError: If the handle is terminal.
            EngineError: If the engine refuses or the file is missing.
        """
        handle = self._release(HandleState.RENAMED)
        self._gateway.call("db_rename", self.engine.db_rename, handle, old_name, new_name)

    def flags(self) -> OpenFlag:
        """Return the flags the database was opened with."""
        handle = self._live()
        flags = self._gateway.call("db_get_open_flags", self.engine.db_get_open_flags, handle)
        return OpenFlag(flags)

    # =========================================================================
    # Point operations
    # =========================================================================

    def put(self, key: bytes, value: bytes) -> None:
        """Store value under key, replacing any existing value."""
        handle = self._live()
        key, value = as_bytes(key, "key"), as_bytes(value, "value")
        self._gateway.call("db_put", self.engine.db_put, handle, key, value, 0)

    def get(self, key: bytes) -> bytes:
        """Return the value stored under key.

        Raises:
            NotFoundError: If the key is absent.
        """
        handle = self._live()
        return self._gateway.call("db_get", self.engine.db_get, handle, as_bytes(key, "key"))

    def delete(self, key: bytes) -> None:
        """Delete the pair stored under key.

        Raises:
            NotFoundError: If the key is absent.
        """
        handle = self._live()
        self._gateway.call("db_del", self.engine.db_del, handle, as_bytes(key, "key"))

    def exists(self, key: bytes) -> bool:
        try:
            self.get(key)
        except NotFoundError:
            return False
        return True

    # =========================================================================
    # Cursors
    # =========================================================================

    def cursor(self) -> CursorPort:
        """Create a cursor over this database. Close it when done."""
        handle = self._live()
        cursor_handle = self._gateway.call("db_cursor", self.engine.db_cursor, handle)
        return Cursor(self, cursor_handle, self._gateway)

    def items(self) -> Iterator[tuple[bytes, bytes]]:
        """Yield every key/value pair in cursor order.

        The cursor is closed when the generator finishes or is discarded.
        """
        with self.cursor() as cursor:
            yield from cursor
