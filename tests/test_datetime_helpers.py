"""Tests for datetime helper utilities."""
from datetime import UTC, date, datetime, timedelta, timezone

from profile_economy.utils.datetime_helpers import ensure_utc, hour_window, utc_date


def test_ensure_utc_none_returns_none():
    """The helper should gracefully handle ``None`` inputs."""

    assert ensure_utc(None) is None


def test_ensure_utc_attaches_timezone_to_naive_datetime():
    """Naive datetimes should be marked as UTC without adjusting the clock."""

    naive = datetime(2024, 5, 1, 12, 30, 0)

    result = ensure_utc(naive)

    assert result.tzinfo is UTC
    assert result.replace(tzinfo=None) == naive


def test_ensure_utc_converts_from_other_timezones_to_utc():
    """Timezone-aware datetimes not already UTC should be converted."""

    eastern = timezone(timedelta(hours=-4))
    aware = datetime(2024, 5, 1, 8, 0, tzinfo=eastern)

    result = ensure_utc(aware)

    assert result.tzinfo is UTC
    assert result.hour == 12


def test_utc_date_uses_utc_calendar_day():
    """Late evening west of UTC is already tomorrow in UTC."""

    pacific = timezone(timedelta(hours=-8))
    local = datetime(2024, 5, 1, 20, 0, tzinfo=pacific)

    assert utc_date(local) == date(2024, 5, 2)


def test_hour_window():
    start, end = hour_window(datetime(2024, 5, 1, 12, 59, 59, 999, tzinfo=UTC))

    assert start == datetime(2024, 5, 1, 12, 0, tzinfo=UTC)
    assert end == datetime(2024, 5, 1, 13, 0, tzinfo=UTC)
