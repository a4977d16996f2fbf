"""Tests for src/core/config.py — YAML loading, env overrides, defaults, SecretStr."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from src.core.config import (
    AlertsConfig,
    GlobalpingConfig,
    LoggingConfig,
    ScheduleConfig,
    Settings,
    get_settings,
    load_settings,
    reset_settings,
)


@pytest.fixture(autouse=True)
def _clean_settings() -> None:
    """Reset the global settings cache before each test."""
    reset_settings()


class TestDefaults:
    """Settings should have sensible defaults when no YAML is provided."""

    def test_default_globalping_config(self) -> None:
        cfg = GlobalpingConfig()
        assert cfg.base_url == "https://api.globalping.io/v1"
        assert cfg.poll_attempts == 120
        assert cfg.poll_interval_ms == 500
        assert cfg.etag_cache_size == 200
        assert cfg.token.get_secret_value() == ""

    def test_default_alerts_config(self) -> None:
        cfg = AlertsConfig()
        assert cfg.min_severity == 1
        assert cfg.recipients == []
        assert cfg.telegram.bot_token.get_secret_value() == ""

    def test_default_schedule_config(self) -> None:
        cfg = ScheduleConfig()
        assert cfg.timezone == "UTC"
        assert cfg.definitions_dir == "measurements"
        assert cfg.run_on_start is True
        assert cfg.allow_overlap is True

    def test_default_logging_config(self) -> None:
        cfg = LoggingConfig()
        assert cfg.level == "INFO"
        assert cfg.format == "json"

    def test_default_thresholds(self) -> None:
        s = Settings()
        assert s.thresholds.rtt.normal == 100
        assert s.thresholds.rtt.warning == 300
        assert s.thresholds.jitter.normal == 30
        assert s.thresholds.ttl.low == 32
        assert s.thresholds.ttl.high == 255
        assert s.thresholds.http.total.warning == 3000

    def test_min_severity_out_of_range_rejected(self) -> None:
        with pytest.raises(ValidationError):
            AlertsConfig(min_severity=4)


class TestYamlLoading:
    """Settings should load correctly from YAML files."""

    def test_load_from_yaml(self, tmp_path: Path) -> None:
        config_data = {
            "app_name": "Probe",
            "globalping": {"token": "gp-token", "poll_attempts": 10},
            "alerts": {"min_severity": 2, "recipients": ["111", "222"]},
            "schedule": {"timezone": "Europe/Berlin"},
            "thresholds": {"rtt": {"normal": 50, "warning": 150}},
            "logging": {"level": "DEBUG", "format": "console"},
        }
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(yaml.dump(config_data))

        settings = load_settings(config_file, environ={})

        assert settings.app_name == "Probe"
        assert settings.globalping.token.get_secret_value() == "gp-token"
        assert settings.globalping.poll_attempts == 10
        assert settings.alerts.min_severity == 2
        assert settings.alerts.recipients == ["111", "222"]
        assert settings.schedule.timezone == "Europe/Berlin"
        assert settings.thresholds.rtt.normal == 50
        assert settings.thresholds.jitter.normal == 30
        assert settings.logging.format == "console"

    def test_load_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        settings = load_settings(tmp_path / "nonexistent.yaml", environ={})
        assert settings.globalping.poll_attempts == 120
        assert settings.app_name == "Wachter"

    def test_load_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")
        settings = load_settings(config_file, environ={})
        assert settings.alerts.min_severity == 1

    def test_inverted_bounds_rejected(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(yaml.dump({"thresholds": {"rtt": {"normal": 300, "warning": 100}}}))
        with pytest.raises(ValidationError):
            load_settings(config_file, environ={})

    def test_get_settings_caches(self, tmp_path: Path) -> None:
        loaded = load_settings(tmp_path / "nonexistent.yaml", environ={})
        assert get_settings() is loaded


class TestEnvOverrides:
    """Environment variables from the agent's .env take precedence over YAML."""

    def test_tokens_from_env(self, tmp_path: Path) -> None:
        settings = load_settings(
            tmp_path / "nonexistent.yaml",
            environ={"GLOBALPING_TOKEN": "gp", "TELEGRAM_TOKEN": "tg"},
        )
        assert settings.globalping.token.get_secret_value() == "gp"
        assert settings.alerts.telegram.bot_token.get_secret_value() == "tg"

    def test_notification_list_is_split(self, tmp_path: Path) -> None:
        settings = load_settings(
            tmp_path / "nonexistent.yaml",
            environ={"NOTIFICATION_LIST": "111, 222,,333"},
        )
        assert settings.alerts.recipients == ["111", "222", "333"]

    def test_notification_level_parsed(self, tmp_path: Path) -> None:
        settings = load_settings(tmp_path / "nonexistent.yaml", environ={"NOTIFICATION_LEVEL": "3"})
        assert settings.alerts.min_severity == 3

    def test_env_beats_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(yaml.dump({"schedule": {"timezone": "UTC", "results_dir": "out"}}))
        settings = load_settings(
            config_file,
            environ={"TIMEZONE": "Asia/Tokyo", "MEASUREMENTS_PATH": "/data/results"},
        )
        assert settings.schedule.timezone == "Asia/Tokyo"
        assert settings.schedule.results_dir == "/data/results"

    def test_empty_env_value_ignored(self, tmp_path: Path) -> None:
        settings = load_settings(tmp_path / "nonexistent.yaml", environ={"APP_NAME": ""})
        assert settings.app_name == "Wachter"


class TestEnvFile:
    """The agent's .env file is read like the process environment."""

    def test_env_file_values_applied(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("TELEGRAM_TOKEN=from-file\nNOTIFICATION_LIST=111,222\n")

        settings = load_settings(tmp_path / "nonexistent.yaml", environ={}, env_file=env_file)

        assert settings.alerts.telegram.bot_token.get_secret_value() == "from-file"
        assert settings.alerts.recipients == ["111", "222"]

    def test_environment_beats_env_file(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("APP_NAME=file\nTIMEZONE=Europe/Berlin\n")

        settings = load_settings(
            tmp_path / "nonexistent.yaml",
            environ={"APP_NAME": "process", "TIMEZONE": ""},
            env_file=env_file,
        )

        assert settings.app_name == "process"
        assert settings.schedule.timezone == "Europe/Berlin"

    def test_env_file_beats_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(yaml.dump({"alerts": {"min_severity": 1}}))
        env_file = tmp_path / ".env"
        env_file.write_text("NOTIFICATION_LEVEL=2\n")

        settings = load_settings(config_file, environ={}, env_file=env_file)

        assert settings.alerts.min_severity == 2

    def test_missing_env_file_ignored(self, tmp_path: Path) -> None:
        settings = load_settings(
            tmp_path / "nonexistent.yaml", environ={}, env_file=tmp_path / "missing.env"
        )
        assert settings.alerts.recipients == []


class TestSecretStr:
    """Sensitive fields should use SecretStr to prevent leaking."""

    def test_secret_str_repr_does_not_leak(self) -> None:
        cfg = GlobalpingConfig(token="super-secret")  # type: ignore[arg-type]
        repr_str = repr(cfg)
        assert "super-secret" not in repr_str
        assert "**********" in repr_str
