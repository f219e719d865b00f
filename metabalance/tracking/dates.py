"""Local-day helpers. Storage is naive UTC; calendar days follow ``settings.default_tz``."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo


def _tz(tz_name: str) -> ZoneInfo:
    return ZoneInfo(tz_name)


def local_today(tz_name: str, now: datetime | None = None) -> date:
    now = now or datetime.now(timezone.utc)
    return now.astimezone(_tz(tz_name)).date()


def week_start(day: date) -> date:
    """Sunday on or before ``day``."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def week_range(day: date) -> tuple[date, date]:
    start = week_start(day)
    return start, start + timedelta(days=6)


def utc_range(start: date, end_exclusive: date, tz_name: str) -> tuple[datetime, datetime]:
    """Naive-UTC bounds [start 00:00 local, end_exclusive 00:00 local)."""
    tz = _tz(tz_name)
    s = datetime.combine(start, time.min, tzinfo=tz).astimezone(timezone.utc)
    e = datetime.combine(end_exclusive, time.min, tzinfo=tz).astimezone(timezone.utc)
    return s.replace(tzinfo=None), e.replace(tzinfo=None)


def utc_day_range(day: date, tz_name: str) -> tuple[datetime, datetime]:
    return utc_range(day, day + timedelta(days=1), tz_name)


def to_naive_utc(value: datetime) -> datetime:
    """Aware datetimes are converted; naive ones are taken as UTC already."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def to_local_date(naive_utc: datetime, tz_name: str) -> date:
    return naive_utc.replace(tzinfo=timezone.utc).astimezone(_tz(tz_name)).date()
