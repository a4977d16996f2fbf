"""Pure functions that turn alerts into outbound message text."""

from __future__ import annotations

from src.monitor.types import Alert

_SEPARATOR = " :: "


def format_alert(alert: Alert, app_name: str = "") -> str:
    """Render ``<app> :: <target> :: <type> :: <text>``, skipping empty parts."""
    parts = [app_name, alert.target, alert.probe_type, alert.text]
    return _SEPARATOR.join(part for part in parts if part)
