from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Protocol
from zoneinfo import ZoneInfo


class Clock(Protocol):
    """Source of "now" in the organization's civil timezone.

    Every component takes the clock as a dependency instead of calling datetime.now()
    so tests can pin the instant and the zone.
    """

    tz: ZoneInfo

    def now(self) -> datetime:
        raise NotImplementedError

    def today(self) -> date:
        raise NotImplementedError


class SystemClock:
    def __init__(self, tz_name: str):
        self.tz = ZoneInfo(tz_name)

    def now(self) -> datetime:
        return datetime.now(timezone.utc).astimezone(self.tz)

    def today(self) -> date:
        return self.now().date()


class FixedClock:
    """Clock pinned to an instant; naive datetimes are read as local wall time."""

    def __init__(self, instant: datetime, tz_name: str):
        self.tz = ZoneInfo(tz_name)
        self.set(instant)

    def set(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=self.tz)
        self._instant = instant.astimezone(self.tz)

    def now(self) -> datetime:
        return self._instant

    def today(self) -> date:
        return self._instant.date()
