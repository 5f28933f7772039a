"""Integration tests for Environment over the file engine."""

from __future__ import annotations

import errno
from pathlib import Path

import pytest

from bdb_handles.adapters.outbound import FileStorageEngine
from bdb_handles.adapters.outbound.file_engine import REGION_FILE
from bdb_handles.application import Database, Environment
from bdb_handles.domain.value_objects import DatabaseType, EnvironmentFlag, HandleState, OpenFlag
from bdb_handles.infrastructure.metrics import MetricsRegistry
from bdb_handles.ports.inbound.handles import (
    AlreadyOpenError,
    EngineError,
    EnvironmentClosedError,
)

ENV_FLAGS = EnvironmentFlag.CREATE | EnvironmentFlag.INIT_MPOOL


@pytest.fixture
def env(
    engine: FileStorageEngine, metrics_registry: MetricsRegistry, temp_dir: Path
) -> Environment:
    environment = Environment.create(engine=engine, metrics=metrics_registry)
    environment.open(temp_dir, ENV_FLAGS)
    yield environment
    if not environment.is_closed:
        environment.close()


@pytest.mark.integration
class TestEnvironment:
    """Test cases for environment lifecycle."""

    def test_open_creates_region(self, env: Environment, temp_dir: Path) -> None:
        assert env.state == HandleState.OPENED
        assert env.home == temp_dir
        assert (temp_dir / REGION_FILE).exists()

    def test_second_open_rejected(self, env: Environment, temp_dir: Path) -> None:
        with pytest.raises(AlreadyOpenError):
            env.open(temp_dir, ENV_FLAGS)

    def test_close_twice(self, env: Environment) -> None:
        env.close()

        assert env.is_closed
        with pytest.raises(EnvironmentClosedError):
            env.close()

    def test_open_after_close(self, engine: FileStorageEngine, temp_dir: Path) -> None:
        environment = Environment.create(engine=engine)
        environment.close()

        with pytest.raises(EnvironmentClosedError):
            environment.open(temp_dir, ENV_FLAGS)

    def test_missing_home(self, engine: FileStorageEngine, temp_dir: Path) -> None:
        """A failed open still counts as the one open attempt."""
        with Environment.create(engine=engine) as environment:
            with pytest.raises(EngineError) as exc_info:
                environment.open(temp_dir / "missing", ENV_FLAGS)
            assert exc_info.value.code == errno.ENOENT
            assert environment.home is None

            with pytest.raises(AlreadyOpenError):
                environment.open(temp_dir, ENV_FLAGS)

    def test_join_existing_region(
        self, env: Environment, engine: FileStorageEngine, temp_dir: Path
    ) -> None:
        """Without CREATE an environment joins the region already in home."""
        with Environment.create(engine=engine) as joined:
            joined.open(temp_dir, EnvironmentFlag(0))
            assert joined.state == HandleState.OPENED

    def test_join_missing_region(self, engine: FileStorageEngine, temp_dir: Path) -> None:
        with Environment.create(engine=engine) as environment:
            with pytest.raises(EngineError) as exc_info:
                environment.open(temp_dir, EnvironmentFlag.INIT_MPOOL)
            assert exc_info.value.code == errno.ENOENT

    def test_mpool_required(self, engine: FileStorageEngine, temp_dir: Path) -> None:
        with Environment.create(engine=engine) as environment:
            with pytest.raises(EngineError) as exc_info:
                environment.open(temp_dir, EnvironmentFlag.CREATE)
            assert exc_info.value.code == errno.EINVAL


@pytest.mark.integration
class TestDatabaseInEnvironment:
    """Test cases for databases created inside an environment."""

    def test_file_lives_in_home(self, env: Environment, temp_dir: Path) -> None:
        with Database.create(environment=env) as db:
            db.open("inner.db", DatabaseType.BTREE, OpenFlag.CREATE)
            db.put(b"k", b"v")
            assert db.get(b"k") == b"v"

        assert (temp_dir / "inner.db").exists()

    def test_create_in_environment(self, env: Environment) -> None:
        db = Database.create_in_environment(env)

        assert db.environment is env
        assert db.engine is env.engine
        db.close()

    def test_engine_must_match_environment(self, env: Environment) -> None:
        """A second engine cannot be slipped in next to an environment."""
        with pytest.raises(ValueError, match="environment's engine"):
            Database.create(environment=env, engine=FileStorageEngine())

        with Database.create(environment=env, engine=env.engine) as db:
            assert db.engine is env.engine

    def test_closed_environment_rejects_new_databases(self, env: Environment) -> None:
        env.close()

        with pytest.raises(EnvironmentClosedError):
            Database.create(environment=env)

    def test_unopened_environment(self, engine: FileStorageEngine) -> None:
        with Environment.create(engine=engine) as environment:
            with pytest.raises(EngineError) as exc_info:
                Database.create(environment=environment)
            assert exc_info.value.code == errno.EINVAL

    def test_environment_close_leaves_databases(self, env: Environment) -> None:
        """Closing the environment does not close its databases."""
        db = Database.create(environment=env)
        db.open("left.db", DatabaseType.HASH, OpenFlag.CREATE)
        env.close()

        assert not db.is_closed
        db.put(b"k", b"v")
        db.close()

    def test_weak_environment_reference(
        self, engine: FileStorageEngine, temp_dir: Path
    ) -> None:
        environment = Environment.create(engine=engine)
        environment.open(temp_dir, ENV_FLAGS)
        db = Database.create(environment=environment)
        environment.close()

        del environment

        assert db.environment is None
        db.close()
