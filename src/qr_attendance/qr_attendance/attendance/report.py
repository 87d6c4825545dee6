from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Sequence

from ..common.datetime_utils import day_of_week
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import DayStatus
from ..core.exceptions import NotFoundError
from ..permissions.repository import PermissionRepository
from ..workers.repository import WorkerRepository
from .model import AttendanceRecord, DailyWorkerRow
from .repository import AttendanceRepository


@dataclass(frozen=True)
class DailySummary:
    work_date: date
    rows: List[DailyWorkerRow] = field(default_factory=list)
    totals: Dict[str, int] = field(default_factory=dict)


class AttendanceReportService:
    """Read side: per-day roster status and per-worker history."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        workers: WorkerRepository,
        permissions: PermissionRepository,
    ):
        self._attendance = attendance
        self._workers = workers
        self._permissions = permissions

    def daily_summary(self, owner_id: int, work_date: date) -> DailySummary:
        records = {r.worker_id: r for r in self._attendance.list_for_owner_and_date(owner_id, work_date)}
        permitted = {p.worker_id for p in self._permissions.list_approved_for_date(owner_id=owner_id, request_date=work_date)}
        dow = day_of_week(work_date)

        rows: List[DailyWorkerRow] = []
        for worker in self._workers.list_active(owner_id=owner_id):
            rec = records.get(worker.worker_id)
            if rec is not None:
                status = DayStatus(rec.status.value)
            elif worker.break_day is not None and worker.break_day == dow:
                status = DayStatus.ON_BREAK
            elif worker.worker_id in permitted:
                status = DayStatus.ON_PERMISSION
            else:
                status = DayStatus.ABSENT

            rows.append(
                DailyWorkerRow(
                    worker_id=worker.worker_id,
                    worker_name=worker.name,
                    status=status,
                    check_in_time=rec.check_in_time if rec else None,
                    check_out_time=rec.check_out_time if rec else None,
                    is_late=rec.is_late if rec else False,
                )
            )

        counts = Counter(r.status for r in rows)
        totals = {s.value: counts.get(s, 0) for s in DayStatus}
        totals["total"] = len(rows)
        return DailySummary(work_date=work_date, rows=rows, totals=totals)

    def history(self, worker_id: int, *, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[AttendanceRecord]:
        """Most recent records first."""

        if self._workers.get_by_id(worker_id) is None:
            raise NotFoundError(f"worker {worker_id} not found")
        return self._attendance.get_recent_for_worker(worker_id, int(limit))
