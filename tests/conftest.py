"""Pytest configuration and fixtures for bdb_handles tests."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Generator

import pytest
from prometheus_client import CollectorRegistry

from bdb_handles.adapters.outbound import FileStorageEngine
from bdb_handles.application import Database
from bdb_handles.domain.value_objects import DatabaseType, OpenFlag
from bdb_handles.infrastructure.config import Config, EngineConfig
from bdb_handles.infrastructure.engine_registry import reset_engine
from bdb_handles.infrastructure.metrics import MetricsRegistry


class RecordingEngine:
    """Forwards to a real engine and records the name of every call made."""

    def __init__(self, engine: FileStorageEngine) -> None:
        self._engine = engine
        self.calls: list[str] = []

    @property
    def not_found_code(self) -> int:
        return self._engine.not_found_code

    def __getattr__(self, name: str) -> Any:
        attr = getattr(self._engine, name)
        if not callable(attr):
            return attr

        def record(*args: Any) -> Any:
            self.calls.append(name)
            return attr(*args)

        return record


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_config() -> Config:
    """Provide a test configuration using the file engine."""
    return Config(engine=EngineConfig(backend="file"))


@pytest.fixture
def metrics_registry() -> MetricsRegistry:
    """Provide a fresh metrics registry for each test."""
    # Use a separate registry to avoid conflicts between tests
    registry = CollectorRegistry(auto_describe=True)
    return MetricsRegistry(registry=registry)


@pytest.fixture
def engine() -> FileStorageEngine:
    """Provide a file storage engine."""
    return FileStorageEngine()


@pytest.fixture
def recording_engine(engine: FileStorageEngine) -> RecordingEngine:
    """Provide an engine that records every call."""
    return RecordingEngine(engine)


@pytest.fixture
def umask() -> int:
    """Return the process umask without changing it."""
    current = os.umask(0)
    os.umask(current)
    return current


@pytest.fixture
def open_db(
    temp_dir: Path, engine: FileStorageEngine, metrics_registry: MetricsRegistry
) -> Generator[Callable[..., Database], None, None]:
    """Factory for opened databases; any still live are closed at teardown."""
    created: list[Database] = []

    def factory(
        name: str = "test_db.db",
        dbtype: DatabaseType = DatabaseType.HASH,
        flags: OpenFlag = OpenFlag.CREATE,
    ) -> Database:
        db = Database.create(engine=engine, metrics=metrics_registry)
        created.append(db)
        db.open(str(temp_dir / name), dbtype, flags)
        return db

    yield factory

    for db in created:
        if not db.is_closed:
            db.close()


@pytest.fixture(autouse=True)
def _reset_global_engine() -> Generator[None, None, None]:
    """Keep the process-wide engine from leaking between tests."""
    reset_engine()
    yield
    reset_engine()


# Markers for test categories
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, isolated)")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "requires_bdb: Needs the berkeleydb distribution")
