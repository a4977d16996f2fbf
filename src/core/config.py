"""Pydantic settings loaded from YAML configuration, with environment overrides."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import dotenv_values
from pydantic import BaseModel, Field, SecretStr

from src.core.thresholds import ThresholdTable

_settings: Settings | None = None

_DEFAULT_CONFIG_PATH = Path("config/settings.yaml")
_DEFAULT_ENV_PATH = Path(".env")


class GlobalpingConfig(BaseModel):
    """Globalping measurement API configuration."""

    base_url: str = "https://api.globalping.io/v1"
    token: SecretStr = SecretStr("")
    timeout_secs: float = 10.0
    poll_attempts: int = Field(default=120, ge=1)
    poll_interval_ms: int = Field(default=500, ge=0)
    etag_cache_size: int = Field(default=200, ge=0)


class TelegramConfig(BaseModel):
    """Telegram Bot API configuration."""

    bot_token: SecretStr = SecretStr("")
    api_url: str = "https://api.telegram.org"


class AlertsConfig(BaseModel):
    """Alert filtering and delivery configuration."""

    min_severity: int = Field(default=1, ge=1, le=3)
    recipients: list[str] = Field(default_factory=list)
    telegram: TelegramConfig = TelegramConfig()


class ScheduleConfig(BaseModel):
    """Probe scheduling and result persistence."""

    timezone: str = "UTC"
    definitions_dir: str = "measurements"
    results_dir: str = "results"
    run_on_start: bool = True
    allow_overlap: bool = True


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"


class Settings(BaseModel):
    """Root settings container."""

    app_name: str = "Wachter"
    globalping: GlobalpingConfig = GlobalpingConfig()
    alerts: AlertsConfig = AlertsConfig()
    schedule: ScheduleConfig = ScheduleConfig()
    thresholds: ThresholdTable = ThresholdTable()
    logging: LoggingConfig = LoggingConfig()


# Environment variable → path into the settings document.
_ENV_OVERRIDES: dict[str, tuple[str, ...]] = {
    "APP_NAME": ("app_name",),
    "GLOBALPING_TOKEN": ("globalping", "token"),
    "TELEGRAM_TOKEN": ("alerts", "telegram", "bot_token"),
    "NOTIFICATION_LIST": ("alerts", "recipients"),
    "NOTIFICATION_LEVEL": ("alerts", "min_severity"),
    "TIMEZONE": ("schedule", "timezone"),
    "DEFINITIONS_PATH": ("schedule", "definitions_dir"),
    "MEASUREMENTS_PATH": ("schedule", "results_dir"),
    "LOG_LEVEL": ("logging", "level"),
}


def _split_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _apply_env_overrides(data: dict[str, Any], environ: dict[str, str]) -> dict[str, Any]:
    """Overlay non-empty environment variables onto the raw settings dict."""
    for env_name, path in _ENV_OVERRIDES.items():
        raw = environ.get(env_name)
        if not raw:
            continue

        value: Any = _split_list(raw) if env_name == "NOTIFICATION_LIST" else raw

        node = data
        for key in path[:-1]:
            child = node.get(key)
            if not isinstance(child, dict):
                child = {}
                node[key] = child
            node = child
        node[path[-1]] = value
    return data


def _read_env_file(env_file: Path) -> dict[str, str]:
    """Non-empty ``KEY=value`` pairs from a dotenv file, or nothing if it is absent."""
    if not env_file.is_file():
        return {}
    return {key: value for key, value in dotenv_values(env_file).items() if value}


def load_settings(
    path: str | Path | None = None,
    environ: dict[str, str] | None = None,
    env_file: str | Path | None = None,
) -> Settings:
    """Load settings from a YAML file, overlay the environment, and cache globally.

    Precedence, lowest first: YAML, the dotenv file, the environment mapping.

    Args:
        path: Path to YAML config. Defaults to config/settings.yaml.
        environ: Environment mapping. Defaults to ``os.environ``.
        env_file: Dotenv file. Defaults to ``.env`` when *environ* is not given;
            with an explicit *environ* no file is read unless one is named.

    Returns:
        Parsed Settings instance.
    """
    global _settings  # noqa: PLW0603

    config_path = Path(path) if path else _DEFAULT_CONFIG_PATH

    data: dict[str, Any] = {}
    if config_path.exists():
        with open(config_path) as f:
            raw = yaml.safe_load(f)
            if isinstance(raw, dict):
                data = raw

    env: dict[str, str] = {}
    if env_file is not None:
        env.update(_read_env_file(Path(env_file)))
    elif environ is None:
        env.update(_read_env_file(_DEFAULT_ENV_PATH))
    process_env = os.environ if environ is None else environ
    env.update({key: value for key, value in process_env.items() if value})

    data = _apply_env_overrides(data, env)

    _settings = Settings(**data)
    return _settings


def get_settings() -> Settings:
    """Return the cached settings, loading defaults if not yet loaded."""
    global _settings  # noqa: PLW0603
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Reset the cached settings (useful for testing)."""
    global _settings  # noqa: PLW0603
    _settings = None
