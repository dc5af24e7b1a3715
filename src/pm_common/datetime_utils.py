"""UTC datetime utilities."""

from datetime import datetime, timedelta, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC; convert aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def hours_from_now(hours: int, now: datetime | None = None) -> datetime:
    return (now or utc_now()) + timedelta(hours=hours)
