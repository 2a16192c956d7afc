"""Datetime utility functions for timezone handling."""
from datetime import date, datetime, timedelta, UTC
from typing import Optional


def utc_now() -> datetime:
    """Default clock for economy operations."""
    return datetime.now(UTC)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Ensure datetime is timezone-aware in UTC.

    Datetimes read back from SQLite are timezone-naive but were written as
    UTC, so naive values are tagged as UTC without moving the clock. Aware
    values in other zones are converted.

    Example:
        >>> naive_dt = datetime(2025, 1, 1, 12, 0, 0)
        >>> ensure_utc(naive_dt).tzinfo is UTC
        True

        >>> ensure_utc(None) is None
        True
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def utc_date(dt: datetime) -> date:
    """Calendar day of ``dt`` in UTC."""
    return ensure_utc(dt).date()


def hour_window(now: datetime) -> tuple[datetime, datetime]:
    """Return the [start, end) UTC hour containing ``now``."""
    start = ensure_utc(now).replace(minute=0, second=0, microsecond=0)
    return start, start + timedelta(hours=1)
