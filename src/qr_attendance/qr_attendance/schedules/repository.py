from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import DayOverride, ScheduleConfig


class ScheduleRepository(Protocol):
    """Schedule source: tenant defaults and weekday overrides."""

    def get_config(self, *, owner_id: int) -> Optional[ScheduleConfig]:
        raise NotImplementedError

    def list_day_overrides(self, *, owner_id: int) -> Sequence[DayOverride]:
        raise NotImplementedError
