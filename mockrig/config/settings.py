"""Configuration settings and loading."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from mockrig.errors.base import ConfigValidationError

ENV_PREFIX = "MOCKRIG_"


class MockServerSettings(BaseSettings):
    """Configuration for the MockServer container and its control API."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    image: str = "mockserver/mockserver:latest"
    host: str = "localhost"
    port: int = 1080
    container_name: str | None = None
    status_path: str = "/status"
    pull_image: bool = True
    ready_retries: int = 7
    ready_base_delay: float = 1.0
    ready_backoff_factor: float = 2.0
    request_timeout: float = 10.0
    log_tail: int = 50

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if not 0 < v < 65536:
            raise ValueError(f"port must be between 1 and 65535, got {v}")
        return v

    @field_validator("ready_retries", "log_tail")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must not be negative")
        return v

    @field_validator("ready_base_delay", "ready_backoff_factor", "request_timeout")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be greater than zero")
        return v

    @field_validator("status_path")
    @classmethod
    def validate_status_path(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError("status_path must start with '/'")
        return v

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @property
    def container_port(self) -> str:
        """Port key in Docker's ``<port>/<proto>`` form."""
        return f"{self.port}/tcp"


def load_config(config_path: str | Path | None = None) -> MockServerSettings:
    """Load configuration from file and environment.

    Priority: env vars > config file > defaults. The file may hold the
    settings at top level or under a ``mockrig:`` section.

    Raises:
        ConfigValidationError: If a value fails validation.
    """
    config_data: dict[str, Any] = {}

    if config_path is not None:
        config_path = Path(config_path)
        if config_path.exists():
            with open(config_path) as f:
                config_data = yaml.safe_load(f) or {}
        if "mockrig" in config_data:
            config_data = config_data["mockrig"] or {}

    # Drop file values that the environment overrides so BaseSettings reads them
    for name in MockServerSettings.model_fields:
        if f"{ENV_PREFIX}{name.upper()}" in os.environ:
            config_data.pop(name, None)

    try:
        return MockServerSettings(**config_data)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ()))
        raise ConfigValidationError(
            message=f"Invalid mockrig configuration: {first.get('msg')}",
            field=field or None,
            value=first.get("input"),
            cause=e,
        ) from e
