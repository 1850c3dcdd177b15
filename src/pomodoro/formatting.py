"""Display helpers for elapsed and remaining session time."""

from __future__ import annotations

from .constants import WORK_UNIT_SECONDS


def format_duration(seconds: int) -> str:
    """Render seconds as ``MM:SS`` (or ``HH:MM:SS`` past an hour), signed."""
    value = int(seconds)
    sign = "-" if value < 0 else ""
    hours, remainder = divmod(abs(value), 3600)
    minutes, secs = divmod(remainder, 60)
    if hours > 0:
        return f"{sign}{hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{sign}{minutes:02d}:{secs:02d}"


def format_work_units(total_seconds: int) -> str:
    # Fractional count of 25 minute work units.
    return f"{max(0, int(total_seconds)) / WORK_UNIT_SECONDS:0.1f}"


def duration_minutes(seconds: int) -> int:
    return max(0, int(seconds)) // 60
