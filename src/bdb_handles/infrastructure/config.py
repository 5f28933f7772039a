"""Configuration management for the handle layer."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from bdb_handles.domain.value_objects import DEFAULT_FILE_MODE


class EngineConfig(BaseModel):
    """Storage engine selection."""

    backend: Literal["file", "berkeleydb"] = Field(
        default="file", description="Storage engine adapter"
    )
    default_mode: int = Field(
        default=DEFAULT_FILE_MODE,
        ge=0,
        le=0o777,
        description="Permission bits for new files when open() passes mode 0",
    )


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(default="json", description="Log format")
    metrics_port: int = Field(default=8001, ge=1, le=65535, description="Prometheus metrics port")
    otel_endpoint: str | None = Field(
        default=None, description="OpenTelemetry collector endpoint"
    )
    otel_service_name: str = Field(default="bdb_handles", description="Service name for tracing")


class Config(BaseSettings):
    """Main configuration for the handle layer."""

    model_config = SettingsConfigDict(
        env_prefix="BDB_HANDLES_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    engine: EngineConfig = Field(default_factory=EngineConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache
def get_config() -> Config:
    """Get the global configuration instance."""
    return Config()
