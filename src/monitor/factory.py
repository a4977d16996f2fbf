"""Convenience factory for wiring the notification stack."""

from __future__ import annotations

from src.core.config import AlertsConfig
from src.monitor.channels import NotificationChannel, TelegramChannel
from src.monitor.notifier import Notifier
from src.monitor.types import Severity


def create_notifier(
    config: AlertsConfig,
    app_name: str = "",
    channel: NotificationChannel | None = None,
) -> Notifier:
    """Build a Notifier from config, delivering over Telegram unless *channel* is given."""
    return Notifier(
        channel=channel or TelegramChannel(config.telegram),
        recipients=config.recipients,
        min_severity=Severity(config.min_severity),
        app_name=app_name,
    )
