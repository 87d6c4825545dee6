from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Mapping, Optional
from zoneinfo import ZoneInfo

from ..common.datetime_utils import end_of_day, local_datetime, start_of_day
from ..core import constants
from ..core.enums import ActionType
from ..core.exceptions import ValidationError
from ..schedules.model import ResolvedSchedule


@dataclass(frozen=True)
class WindowPolicy:
    """Minutes a token window opens before / closes after its scheduled boundary.

    Arrival windows bracket the start time, departure windows the end time.
    """

    arrival_opens_before: int = constants.DEFAULT_ARRIVAL_OPENS_BEFORE
    arrival_closes_after: int = constants.DEFAULT_ARRIVAL_CLOSES_AFTER
    departure_opens_before: int = constants.DEFAULT_DEPARTURE_OPENS_BEFORE
    departure_closes_after: int = constants.DEFAULT_DEPARTURE_CLOSES_AFTER

    def __post_init__(self) -> None:
        for name in ("arrival_opens_before", "arrival_closes_after", "departure_opens_before", "departure_closes_after"):
            if int(getattr(self, name)) < 0:
                raise ValidationError(f"{name} must not be negative")

    @classmethod
    def from_mapping(cls, values: Optional[Mapping[str, Any]]) -> "WindowPolicy":
        if not values:
            return cls()
        known = {k: int(v) for k, v in values.items() if k in cls.__dataclass_fields__}
        return cls(**known)

    def offsets(self, action: ActionType) -> tuple[int, int]:
        if action == ActionType.ARRIVAL:
            return self.arrival_opens_before, self.arrival_closes_after
        return self.departure_opens_before, self.departure_closes_after


@dataclass(frozen=True)
class ValidityWindow:
    valid_from: datetime
    valid_until: datetime

    def contains(self, now: datetime) -> bool:
        return self.valid_from <= now <= self.valid_until


def compute_window(
    *,
    action: ActionType,
    schedule: ResolvedSchedule,
    work_date: date,
    tz: ZoneInfo,
    policy: WindowPolicy,
) -> ValidityWindow:
    """Window around the scheduled boundary, clamped to the local calendar day."""

    boundary = schedule.start_time if action == ActionType.ARRIVAL else schedule.end_time
    anchor = local_datetime(work_date, boundary, tz)
    before, after = policy.offsets(action)

    valid_from = max(anchor - timedelta(minutes=before), start_of_day(work_date, tz))
    valid_until = min(anchor + timedelta(minutes=after), end_of_day(work_date, tz))
    return ValidityWindow(valid_from=valid_from, valid_until=valid_until)
