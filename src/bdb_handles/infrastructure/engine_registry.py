"""Process-wide default storage engine."""

from __future__ import annotations

from bdb_handles.infrastructure.config import Config, get_config
from bdb_handles.ports.outbound.storage_engine import StorageEngine


_engine: StorageEngine | None = None


def create_engine(config: Config | None = None) -> StorageEngine:
    """
    Build the storage engine adapter selected by configuration.

    Args:
        config: Configuration to read; the global one if omitted

    Returns:
        A new engine instance
    """
    config = config or get_config()
    if config.engine.backend == "berkeleydb":
        from bdb_handles.adapters.outbound.berkeleydb_engine import BerkeleyDBEngine

        return BerkeleyDBEngine()

    from bdb_handles.adapters.outbound.file_engine import FileStorageEngine

    return FileStorageEngine(default_mode=config.engine.default_mode)


def get_engine() -> StorageEngine:
    """Get the global engine, creating it from configuration on first use."""
    global _engine
    if _engine is None:
        _engine = create_engine()
    return _engine


def set_engine(engine: StorageEngine) -> None:
    """Replace the global engine."""
    global _engine
    _engine = engine


def reset_engine() -> None:
    """Drop the global engine (useful for testing)."""
    global _engine
    _engine = None
