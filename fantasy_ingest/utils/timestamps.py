"""Timezone-aware timestamp utilities."""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Return current UTC time as timezone-aware datetime.

    Use instead of deprecated ``datetime.utcnow()`` which returns naive datetimes.
    """
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes, convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_cargo_datetime(value: datetime) -> str:
    """Format a datetime the way Cargo stores DateTime_UTC (``YYYY-MM-DD HH:MM:SS``)."""
    return as_utc(value).strftime("%Y-%m-%d %H:%M:%S")
