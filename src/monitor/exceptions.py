"""Exception hierarchy for alert delivery."""

from __future__ import annotations


class NotificationError(Exception):
    """Base exception for all notification errors."""


class NoRecipientsError(NotificationError):
    """No recipients are configured, so nothing can be delivered."""


class NotificationDeliveryError(NotificationError):
    """One or more recipients could not be reached."""

    def __init__(self, failed_recipients: list[str]) -> None:
        self.failed_recipients = failed_recipients
        super().__init__(
            f"delivery failed for {len(failed_recipients)} recipient(s): "
            f"{', '.join(failed_recipients)}"
        )
