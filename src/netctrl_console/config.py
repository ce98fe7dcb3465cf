"""Configuration for the netctrl console."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from netctrl_console.utils.errors import ConfigurationError


class LogLevel(str, Enum):
    """Logging level."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class ConsoleConfig(BaseSettings):
    """Configuration for talking to netctrl-server.

    Loaded from environment variables with NETCTRL_ prefix
    or from a .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="NETCTRL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    base_url: str = Field(
        default="http://localhost:8080",
        description="Root URL of netctrl-server",
    )
    api_prefix: str = Field(
        default="/api",
        description="Path prepended to every resource call",
    )
    health_path: str = Field(
        default="/health",
        description="Liveness probe path, relative to the API prefix",
    )
    timeout: float | None = Field(
        default=None,
        gt=0,
        description="Request timeout in seconds (None keeps the httpx default)",
    )
    cache_stale_time: float | None = Field(
        default=None,
        gt=0,
        description="Seconds a cached read stays fresh (None means until invalidated)",
    )
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level",
    )

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) URL, got {value!r}")
        return value

    @field_validator("api_prefix", "health_path")
    @classmethod
    def normalize_path(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if value and not value.startswith("/"):
            value = "/" + value
        return value

    @property
    def api_url(self) -> str:
        """Base URL with the API prefix applied."""
        return f"{self.base_url}{self.api_prefix}"


def get_config(**overrides: Any) -> ConsoleConfig:
    """Build a configuration from the environment.

    Args:
        **overrides: Field values that take precedence over the environment.

    Raises:
        ConfigurationError: If a setting is invalid.
    """
    try:
        return ConsoleConfig(**overrides)
    except PydanticValidationError as e:
        raise ConfigurationError(str(e)) from e
