"""
Domain time utilities (pure).

Centralized timestamp validation and serialization helpers.

Persisted records carry timestamps as ISO-8601 strings in UTC with millisecond
precision and a trailing 'Z' (e.g. 2025-01-01T12:00:00.000Z). Behavior and error
messages must remain consistent across the domain model.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Optional


def require_utc_timestamp(name: str, value: datetime) -> None:
    """
    Enforces that timestamps are UTC.

    Invariants:
    - Timestamps must be timezone-aware.
    - Timestamps must have UTC offset 0.
    """

    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError(f"{name} must be timezone-aware (UTC)")
    if value.utcoffset() != timedelta(0):
        raise ValueError(f"{name} must be a UTC timestamp (offset 0)")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso_utc(value: datetime) -> str:
    """Serialize a timezone-aware datetime as `YYYY-MM-DDTHH:MM:SS.mmmZ`."""

    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError("timestamp must be timezone-aware (UTC)")
    text = value.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


def parse_utc_datetime(value: Any) -> Optional[datetime]:
    """
    Parse a persisted timestamp into a timezone-aware UTC datetime.

    Returns None for values that cannot be parsed; persisted records are not
    trusted to be well-formed. Naive timestamps are interpreted as UTC.
    """

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value.strip():
        # Python's fromisoformat doesn't consistently accept 'Z' across versions.
        text = value.strip().replace("Z", "+00:00")
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if dt.tzinfo is None or dt.utcoffset() is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def to_epoch_ms(value: datetime) -> int:
    require_utc_timestamp("value", value)
    return (value - _EPOCH) // timedelta(milliseconds=1)
