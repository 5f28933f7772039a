"""Environment - a shared engine context for several databases.

An Environment is opened once on a home directory. Databases created
inside it share the engine's memory pool, and their file names resolve
relative to the home directory. The Environment does not track or own
those databases: closing it does not close them.

Usage:
    with Environment.create() as env:
        env.open(home, EnvironmentFlag.CREATE | EnvironmentFlag.INIT_MPOOL)
        with Database.create(environment=env) as db:
            db.open("data.db", DatabaseType.BTREE, OpenFlag.CREATE)
"""

from __future__ import annotations

from pathlib import Path

from bdb_handles.application.engine_gateway import EngineGateway
from bdb_handles.application.managed_handle import ManagedHandle
from bdb_handles.domain.value_objects import EnvironmentFlag
from bdb_handles.infrastructure.engine_registry import get_engine
from bdb_handles.infrastructure.metrics import MetricsRegistry
from bdb_handles.ports.inbound.handles import EnvironmentClosedError
from bdb_handles.ports.outbound.storage_engine import EnvHandle, StorageEngine


class Environment(ManagedHandle):
    """Wrapper around one engine environment handle."""

    kind = "environment"
    closed_error = EnvironmentClosedError

    def __init__(
        self,
        engine: StorageEngine | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        """Allocate the engine environment handle.

        Args:
            engine: Storage engine (the global default if omitted).
            metrics: Metrics registry (the global one if omitted).

        Raises:
            EngineError: If the engine cannot allocate the handle.
        """
        gateway = EngineGateway(engine or get_engine(), metrics)
        handle = gateway.call("env_create", gateway.engine.env_create)
        super().__init__(handle, gateway)
        self._home: Path | None = None

    @classmethod
    def create(
        cls,
        engine: StorageEngine | None = None,
        metrics: MetricsRegistry | None = None,
    ) -> Environment:
        return cls(engine=engine, metrics=metrics)

    @property
    def engine(self) -> StorageEngine:
        return self._gateway.engine

    @property
    def home(self) -> Path | None:
        """Home directory of a successful open(), None otherwise."""
        return self._home

    def open(self, home: str | Path, flags: EnvironmentFlag, mode: int = 0) -> None:
        """Initialize the shared context rooted at a home directory.

        A failed open still counts as the one open attempt.

        Args:
            home: Existing directory for the environment's region files.
            flags: At least CREATE | INIT_MPOOL for a new environment.
            mode: Permission bits for created files (0 for the default).

        Raises:
            EnvironmentClosedError: If the environment is closed.
            AlreadyOpenError: If open() was attempted before.
            EngineError: If the engine rejects the open.
        """
        handle = self._begin_open()
        self._gateway.call(
            "env_open", self.engine.env_open, handle, str(home), int(flags), mode
        )
        self._home = Path(home)

    def close(self) -> None:
        """Close the environment. The handle is gone even if the engine fails.

        Raises:
            EnvironmentClosedError: If already closed.
            EngineError: If the engine reports a failure.
        """
        handle = self._release()
        self._gateway.call("env_close", self.engine.env_close, handle, 0)

    def _attach(self) -> EnvHandle:
        """Return the engine handle for a database being created inside."""
        return self._live()
