"""Configuration management for the VQL console."""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Any, Literal

import yaml
from loguru import logger
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from vql_console.errors import ConfigurationError

OutputFormat = Literal["text", "json", "csv"]

DEFAULT_HISTORY_FILE = Path(tempfile.gettempdir()) / "vql_console_history"
DEFAULT_PROMPT = "VQL > "


class Settings(BaseSettings):
    """Console settings, built once at startup."""

    model_config = SettingsConfigDict(
        env_prefix="VQL_CONSOLE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Output
    format: OutputFormat = Field(default="json", description="Output format to use")
    dump_dir: Path = Field(default=Path("."), description="Directory to dump output files")

    # Session
    history_file: Path = Field(default=DEFAULT_HISTORY_FILE, description="Filename to store history in")
    prompt: str = Field(default=DEFAULT_PROMPT, description="Prompt prefix")
    max_suggestions: int = Field(default=10, ge=1, description="Completion menu height")

    # Scope
    config_file: Path | None = Field(default=None, description="YAML configuration bound into scope")
    env: dict[str, str] = Field(default_factory=dict, description="Extra scope bindings")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        level = value.upper()
        # Raises ValueError for levels loguru does not know.
        logger.level(level)
        return level


def load_settings(**overrides: Any) -> Settings:
    """Load settings from environment and ``.env``; non-empty overrides take precedence."""

    updates = {key: value for key, value in overrides.items() if value is not None}
    try:
        return Settings(**updates)
    except ValidationError as exc:
        raise ConfigurationError(f"invalid settings: {_describe(exc)}") from exc


def _describe(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in error['loc']) or 'settings'}: {error['msg']}" for error in exc.errors()
    )


def parse_env_pairs(pairs: list[str]) -> dict[str, str]:
    """Parse ``KEY=VALUE`` command line pairs."""

    env: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ConfigurationError(f"invalid env binding, expected KEY=VALUE: {pair}")
        env[key] = value
    return env


def load_config_file(path: Path | None) -> dict[str, Any]:
    """Read the YAML configuration bound into scope as ``server_config``."""

    if path is None:
        return {}
    try:
        with open(path, encoding="utf-8") as file:
            data = yaml.safe_load(file)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"unable to load config {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"config {path} must contain a mapping")
    return data
