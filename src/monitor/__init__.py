"""Alerting subsystem — alert types, channels, and the notifier."""

from src.monitor.channels import NotificationChannel, TelegramChannel
from src.monitor.exceptions import (
    NoRecipientsError,
    NotificationDeliveryError,
    NotificationError,
)
from src.monitor.factory import create_notifier
from src.monitor.formatters import format_alert
from src.monitor.notifier import Notifier
from src.monitor.types import Alert, Severity

__all__ = [
    "Alert",
    "NoRecipientsError",
    "NotificationChannel",
    "NotificationDeliveryError",
    "NotificationError",
    "Notifier",
    "Severity",
    "TelegramChannel",
    "create_notifier",
    "format_alert",
]
