"""Utilities for date and time operations.

All timestamps are stored as naive UTC datetimes and rendered in the
JavaScript `Date.toISOString()` shape (`2024-01-01T00:00:00.000Z`).
"""

from datetime import date, datetime, timezone
from typing import Any


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (storage representation)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_storage_datetime(dt: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive values are assumed UTC."""
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def parse_datetime(value: Any) -> datetime | None:
    """Parse a caller-supplied date-time.

    Accepts datetime/date objects, epoch milliseconds (int/float) and
    ISO-8601 strings, including a trailing `Z`. Numeric strings are
    treated as epoch milliseconds.

    Returns:
        Naive UTC datetime, or None when the value cannot be interpreted.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return to_storage_datetime(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc).replace(tzinfo=None)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.lstrip("-").isdigit():
            return parse_datetime(int(text))
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            return to_storage_datetime(datetime.fromisoformat(text))
        except ValueError:
            return None
    return None


def format_datetime(dt: datetime) -> str:
    """Render a stored datetime as ISO-8601 UTC with milliseconds."""
    dt = to_storage_datetime(dt)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


__all__ = ["utcnow", "to_storage_datetime", "parse_datetime", "format_datetime"]
