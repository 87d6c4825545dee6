from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def minute_of_day(value: datetime | time) -> int:
    return value.hour * 60 + value.minute


def day_of_week(work_date: date) -> int:
    """0=Sunday .. 6=Saturday, the convention used by stored day overrides and break days."""
    return (work_date.weekday() + 1) % 7


def local_datetime(work_date: date, at: time, tz: ZoneInfo) -> datetime:
    return datetime.combine(work_date, at, tzinfo=tz)


def start_of_day(work_date: date, tz: ZoneInfo) -> datetime:
    return datetime.combine(work_date, time(0, 0), tzinfo=tz)


def end_of_day(work_date: date, tz: ZoneInfo) -> datetime:
    return start_of_day(work_date, tz) + timedelta(days=1) - timedelta(seconds=1)


def to_utc_naive(value: Optional[datetime]) -> Optional[datetime]:
    """MySQL DATETIME columns hold UTC without tzinfo."""
    if value is None:
        return None
    if value.tzinfo is None:
        raise ValueError("Refusing to store a naive datetime")
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def from_utc_naive(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None
