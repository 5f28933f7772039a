"""Unit tests for configuration module."""

from __future__ import annotations

import pytest

from bdb_handles.adapters.outbound import FileStorageEngine
from bdb_handles.infrastructure.config import (
    Config,
    EngineConfig,
    ObservabilityConfig,
    get_config,
)
from bdb_handles.infrastructure.engine_registry import (
    create_engine,
    get_engine,
    reset_engine,
    set_engine,
)


@pytest.mark.unit
class TestConfig:
    """Tests for Config class."""

    def test_default_config(self) -> None:
        """Test default configuration values."""
        config = Config()

        assert config.engine.backend == "file"
        assert config.engine.default_mode == 0o660
        assert config.observability.log_level == "INFO"
        assert config.observability.log_format == "json"
        assert config.observability.metrics_port == 8001
        assert config.observability.otel_endpoint is None

    def test_custom_engine_config(self) -> None:
        """Test custom engine configuration."""
        engine = EngineConfig(backend="berkeleydb", default_mode=0o600)

        assert engine.backend == "berkeleydb"
        assert engine.default_mode == 0o600

    def test_invalid_backend(self) -> None:
        """Test that an unknown backend raises validation error."""
        with pytest.raises(ValueError):
            EngineConfig(backend="sqlite")  # type: ignore

    def test_invalid_default_mode(self) -> None:
        """Test that mode bits beyond 0o777 are rejected."""
        with pytest.raises(ValueError):
            EngineConfig(default_mode=0o1777)

    def test_log_formats(self) -> None:
        """Test valid log formats."""
        for log_format in ["json", "console"]:
            obs = ObservabilityConfig(log_format=log_format)  # type: ignore
            assert obs.log_format == log_format

    def test_environment_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test nested settings read from the environment."""
        monkeypatch.setenv("BDB_HANDLES_ENGINE__DEFAULT_MODE", "384")
        monkeypatch.setenv("BDB_HANDLES_OBSERVABILITY__LOG_LEVEL", "DEBUG")

        config = Config()

        assert config.engine.default_mode == 0o600
        assert config.observability.log_level == "DEBUG"


@pytest.mark.unit
class TestConfigSingleton:
    """Tests for get_config singleton."""

    def test_get_config_returns_same_instance(self) -> None:
        """Test that get_config returns the same instance."""
        config1 = get_config()
        config2 = get_config()
        assert config1 is config2


@pytest.mark.unit
class TestEngineRegistry:
    """Tests for the process-wide engine."""

    def test_create_file_engine(self, test_config: Config) -> None:
        engine = create_engine(test_config)
        assert isinstance(engine, FileStorageEngine)

    def test_get_engine_is_cached(self) -> None:
        assert get_engine() is get_engine()

    def test_set_and_reset(self) -> None:
        engine = FileStorageEngine()
        set_engine(engine)
        assert get_engine() is engine

        reset_engine()
        assert get_engine() is not engine
