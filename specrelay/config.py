"""Configuration loading for the specrelay event adapter.

This module provides centralized configuration management:
- Load settings from environment variables and .env files
- Validate configuration using pydantic
- Provide typed access to all settings
"""

from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SinkBackend = Literal["stdout", "jsonl", "http"]


class Settings(BaseSettings):
    """Adapter configuration loaded from environment.

    Uses pydantic-settings for environment variable handling with
    .env file support. Every variable is prefixed with SPECRELAY_.
    """

    model_config = SettingsConfigDict(
        env_prefix="SPECRELAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Run context
    correlation_id: str = Field(
        default="0-0",
        description="Identifier of the execution worker attached to every event",
    )
    clean_stack: bool = Field(
        default=True,
        description="Remove internal and third-party frames from failure traces",
    )
    spec_files: list[str] = Field(
        default_factory=list,
        description="Spec files handled by this worker",
    )
    environment_info: dict[str, Any] = Field(
        default_factory=dict,
        description="Descriptive metadata about the environment under test",
    )

    # Sink configuration
    sink_backends: list[SinkBackend] = Field(
        default_factory=lambda: ["stdout"],
        description="Reporter sinks events are published to",
    )
    sink_verbose: bool = Field(
        default=False,
        description="Print full payloads from the stdout sink",
    )
    sink_jsonl_path: str = Field(
        default="./reports/events.jsonl",
        description="Output file for the JSON lines sink",
    )
    sink_http_url: str = Field(
        default="http://localhost:4567",
        description="Base URL of the HTTP reporter service",
    )
    sink_http_endpoint: str = Field(
        default="/events",
        description="Path events are posted to",
    )
    sink_http_timeout_seconds: float = Field(
        default=5.0,
        description="Timeout per HTTP publish in seconds",
    )

    # Logging configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Log level",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log format",
    )

    @field_validator("sink_backends")
    @classmethod
    def validate_sink_backends(cls, v: list[str]) -> list[str]:
        """Ensure at least one sink is configured."""
        if not v:
            raise ValueError("sink_backends must name at least one sink")
        return v

    @field_validator("sink_http_timeout_seconds")
    @classmethod
    def validate_http_timeout(cls, v: float) -> float:
        """Ensure HTTP timeout is positive."""
        if v <= 0:
            raise ValueError("sink_http_timeout_seconds must be positive")
        return v


def load_settings(env_file: str | None = None) -> Settings:
    """Load adapter settings from environment.

    Args:
        env_file: Optional path to .env file. If not provided,
                 uses the default .env in the current directory.

    Returns:
        Validated Settings instance.

    Raises:
        ValidationError: If settings validation fails.
    """
    if env_file:
        return Settings(_env_file=env_file)  # type: ignore[call-arg]
    return Settings()


__all__ = ["Settings", "load_settings"]
