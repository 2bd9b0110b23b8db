"""Configuration loading and validation for the event model."""

from __future__ import annotations

from copy import deepcopy
import logging
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ValidationError, field_validator

from .exceptions import ConfigValidationError

import tomllib  # stdlib since Python 3.11 (project requires >=3.11)

LOGGER = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "event-model"
CONFIG_PATH = CONFIG_DIR / "config.toml"

VALID_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class EventsConfig(BaseModel):
    """Dispatch behaviour shared by every event model object."""

    handler_errors: Literal["raise", "log"] = "raise"
    trace_dispatch: bool = False

    @field_validator("handler_errors", mode="before")
    @classmethod
    def _normalize_handler_errors(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("handler_errors must be a string.")
        return value.strip().lower()


class LoggingConfig(BaseModel):
    """Logging behavior and output destinations."""

    level: str = "INFO"
    structured: bool = True
    log_to_file: bool = False
    log_file_path: str = "~/.local/state/event-model/event-model.log"

    @field_validator("level", mode="before")
    @classmethod
    def _validate_level(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("Logging level must be a string.")
        normalized = value.strip().upper()
        if normalized not in VALID_LOG_LEVELS:
            raise ValueError(f"Unsupported log level {normalized!r}.")
        return normalized

    @field_validator("log_file_path", mode="before")
    @classmethod
    def _validate_log_file_path(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("log_file_path must be a string.")
        normalized = value.strip()
        if not normalized:
            raise ValueError("log_file_path must not be empty.")
        return normalized


class Config(BaseModel):
    """Root configuration model for all sections."""

    events: EventsConfig = EventsConfig()
    logging: LoggingConfig = LoggingConfig()


DEFAULT_CONFIG: dict[str, dict[str, Any]] = Config().model_dump()


def ensure_config_dir(config_dir: Path | None = None) -> Path:
    """Ensure that the config directory exists and return its path."""
    directory = config_dir or CONFIG_DIR
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        LOGGER.warning("Unable to create config directory %s: %s", directory, exc)
    return directory


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override values onto base values."""
    merged: dict[str, Any] = deepcopy(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _safe_default_config() -> dict[str, dict[str, Any]]:
    return deepcopy(DEFAULT_CONFIG)


def _validate_config(raw: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """Validate merged config and fall back to safe defaults when possible."""
    try:
        return Config.model_validate(raw).model_dump()
    except ValidationError as exc:
        LOGGER.warning(
            "config.invalid",
            extra={"event": "config.invalid", "reason": str(exc)},
        )
        return _safe_default_config()
    except Exception as exc:  # noqa: BLE001 - unexpected model construction failure.
        raise ConfigValidationError(f"Unable to validate configuration: {exc}") from exc


def load_config(config_path: Path | None = None) -> dict[str, dict[str, Any]]:
    """
    Load configuration from TOML, merge with defaults, and validate.

    The optional ``config_path`` argument is intended for tests and tooling.
    """
    target_path = config_path or CONFIG_PATH
    ensure_config_dir(target_path.parent)

    raw_data: dict[str, Any] = {}
    if target_path.exists():
        try:
            raw_data = tomllib.loads(target_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as exc:
            LOGGER.warning("Failed to parse config at %s: %s", target_path, exc)
            raw_data = {}

    return _validate_config(_deep_merge(DEFAULT_CONFIG, raw_data))
