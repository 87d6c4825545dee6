from __future__ import annotations

from dataclasses import dataclass, field
from datetime import time
from typing import Mapping, Optional

from ..core.constants import DEFAULT_END_TIME, DEFAULT_LATE_GRACE_MINUTES, DEFAULT_START_TIME


@dataclass(frozen=True)
class ScheduleConfig:
    """Tenant-wide defaults (settings row of one owner)."""

    owner_id: int
    default_start_time: time = DEFAULT_START_TIME
    default_end_time: time = DEFAULT_END_TIME
    late_grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES


@dataclass(frozen=True)
class DayOverride:
    """Per-weekday schedule of a tenant; day_of_week uses 0=Sunday .. 6=Saturday."""

    owner_id: int
    day_of_week: int
    start_time: time
    end_time: time
    is_enabled: bool = True


@dataclass(frozen=True)
class ScheduleSnapshot:
    config: ScheduleConfig
    day_overrides: Mapping[int, DayOverride] = field(default_factory=dict)

    def override_for(self, day_of_week: int) -> Optional[DayOverride]:
        ov = self.day_overrides.get(day_of_week)
        if ov and ov.is_enabled:
            return ov
        return None


@dataclass(frozen=True)
class ResolvedSchedule:
    start_time: time
    end_time: time
    late_grace_minutes: int
    source: str
