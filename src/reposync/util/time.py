from __future__ import annotations

from datetime import datetime, timezone

MANIFEST_TIME_FORMAT: str = "%Y-%m-%d %H:%M:%S"


def now_utc() -> datetime:
    """Return current time as tz-aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_manifest_time(value: str) -> datetime:
    """
    Parse a manifest 'time' field into a tz-aware UTC datetime.

    The field is always written as 'YYYY-MM-DD HH:MM:SS' in UTC, without an
    offset, e.g. '2025-01-01 12:34:56'.
    """
    if not isinstance(value, str) or not value:
        raise ValueError("manifest time must be a non-empty string")

    dt = datetime.strptime(value, MANIFEST_TIME_FORMAT)  # raises ValueError if invalid
    return dt.replace(tzinfo=timezone.utc)


def normalize_dt(dt: datetime) -> datetime:
    """Ensure datetime is tz-aware. Raises if naive."""
    if not isinstance(dt, datetime):
        raise TypeError("dt must be a datetime")
    if dt.tzinfo is None:
        raise ValueError("naive datetime is not allowed; timezone-aware required")
    return dt
