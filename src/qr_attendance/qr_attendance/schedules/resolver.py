from __future__ import annotations

from datetime import date

from ..common.datetime_utils import day_of_week
from ..workers.model import Worker
from .model import ResolvedSchedule, ScheduleConfig, ScheduleSnapshot
from .repository import ScheduleRepository


def resolve_schedule(worker: Worker, work_date: date, snapshot: ScheduleSnapshot) -> ResolvedSchedule:
    """Effective schedule of a worker on a date.

    Precedence: enabled weekday override > worker custom time > tenant default.
    The custom and default layers are resolved per boundary, so a worker with only a
    custom start still ends at the tenant default end.
    """

    grace = int(snapshot.config.late_grace_minutes)

    override = snapshot.override_for(day_of_week(work_date))
    if override:
        return ResolvedSchedule(
            start_time=override.start_time,
            end_time=override.end_time,
            late_grace_minutes=grace,
            source="day_override",
        )

    start = worker.custom_start_time or snapshot.config.default_start_time
    end = worker.custom_end_time or snapshot.config.default_end_time
    custom = worker.custom_start_time is not None or worker.custom_end_time is not None
    return ResolvedSchedule(
        start_time=start,
        end_time=end,
        late_grace_minutes=grace,
        source="worker" if custom else "default",
    )


class ScheduleResolver:
    """Loads a tenant's configuration snapshot and resolves against it."""

    def __init__(self, schedules: ScheduleRepository):
        self._schedules = schedules

    def snapshot(self, owner_id: int) -> ScheduleSnapshot:
        config = self._schedules.get_config(owner_id=owner_id) or ScheduleConfig(owner_id=owner_id)
        overrides = {ov.day_of_week: ov for ov in self._schedules.list_day_overrides(owner_id=owner_id)}
        return ScheduleSnapshot(config=config, day_overrides=overrides)

    def resolve(self, worker: Worker, work_date: date) -> ResolvedSchedule:
        return resolve_schedule(worker, work_date, self.snapshot(worker.owner_id))
