"""Human-readable durations for certificate expiry messages."""

from __future__ import annotations

_MS_PER_HOUR = 1000 * 60 * 60
_MS_PER_DAY = _MS_PER_HOUR * 24


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def format_duration_ms(ms: int) -> str:
    """Render a non-negative millisecond count as ``"D days, H hours"``.

    Both parts truncate toward zero; leftover minutes are dropped.

    Raises:
        ValueError: *ms* is negative or not an integer.
    """
    if isinstance(ms, bool) or not isinstance(ms, int) or ms < 0:
        raise ValueError(f"duration must be a non-negative integer, got {ms!r}")

    days, remainder = divmod(ms, _MS_PER_DAY)
    hours = remainder // _MS_PER_HOUR
    return f"{_plural(days, 'day')}, {_plural(hours, 'hour')}"
