"""Alert notifier — severity filter in front of a notification channel."""

from __future__ import annotations

import structlog

from src.core.logging import SEVERITY_LOG_LEVELS
from src.monitor.channels import NotificationChannel
from src.monitor.exceptions import NoRecipientsError, NotificationDeliveryError
from src.monitor.formatters import format_alert
from src.monitor.types import Alert, Severity

# Dedicated structured logger for every alert the notifier sees.
alert_logger = structlog.get_logger("alert_log")

logger = structlog.get_logger(__name__)


class Notifier:
    """Fans alerts out to every configured recipient.

    - Every alert is logged via *alert_logger*, filtered or not.
    - Alerts below *min_severity* are log-only.
    - Surviving alerts produce one message per recipient, in call order.
    - Recipients are attempted independently; failures are reported
      together once all of them were tried.
    """

    def __init__(
        self,
        channel: NotificationChannel,
        recipients: list[str] | None = None,
        min_severity: Severity = Severity.INFO,
        app_name: str = "",
    ) -> None:
        self._channel = channel
        self._recipients: list[str] = list(recipients or [])
        self._min_severity = Severity(min_severity)
        self._app_name = app_name

    @property
    def recipients(self) -> list[str]:
        return list(self._recipients)

    @property
    def min_severity(self) -> Severity:
        return self._min_severity

    async def dispatch(self, alert: Alert) -> None:
        """Deliver *alert* to every recipient if it meets the minimum severity.

        Raises:
            NoRecipientsError: no recipients are configured.
            NotificationDeliveryError: at least one recipient failed.
        """
        if not self._recipients:
            raise NoRecipientsError(
                "no notification recipients configured (set alerts.recipients or NOTIFICATION_LIST)"
            )

        text = format_alert(alert, self._app_name)
        self._log_alert(alert, text)

        if alert.severity < self._min_severity:
            return

        failed: list[str] = []
        for recipient in self._recipients:
            try:
                delivered = await self._channel.send(recipient, text)
            except Exception:
                logger.exception(
                    "channel_dispatch_error",
                    channel=type(self._channel).__name__,
                    recipient=recipient,
                )
                delivered = False
            if not delivered:
                failed.append(recipient)

        if failed:
            raise NotificationDeliveryError(failed)

    def _log_alert(self, alert: Alert, text: str) -> None:
        alert_logger.log(
            SEVERITY_LOG_LEVELS[alert.severity],
            "alert",
            severity=alert.severity.name,
            target=alert.target,
            probe_type=alert.probe_type,
            text=text,
        )

    async def close(self) -> None:
        try:
            await self._channel.close()
        except Exception:
            logger.exception("channel_close_error", channel=type(self._channel).__name__)
