from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus
from ..core.exceptions import InvariantViolation
from ..workers.model import Worker
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceLedger:
    """Applies successful redemptions to the one-per-day attendance record."""

    def __init__(self, attendance: AttendanceRepository):
        self._attendance = attendance

    def apply_arrival(
        self,
        worker: Worker,
        work_date: date,
        timestamp: datetime,
        is_late: bool,
        *,
        scanner_id: Optional[int] = None,
    ) -> AttendanceRecord:
        existing = self._attendance.get_for_worker_and_date(worker.worker_id, work_date)
        if existing and existing.check_in_time is not None:
            # Only an administrative correction path gets here.
            logger.warning(
                "Overwriting arrival of existing attendance record",
                extra={"worker_id": worker.worker_id, "work_date": work_date.isoformat()},
            )

        return self._attendance.upsert_arrival(
            worker_id=worker.worker_id,
            owner_id=worker.owner_id,
            work_date=work_date,
            check_in_time=timestamp,
            status=AttendanceStatus.LATE if is_late else AttendanceStatus.IN,
            is_late=is_late,
            scanner_id=scanner_id,
        )

    def apply_departure(
        self,
        worker: Worker,
        work_date: date,
        timestamp: datetime,
        *,
        scanner_id: Optional[int] = None,
    ) -> AttendanceRecord:
        record = self._attendance.get_for_worker_and_date(worker.worker_id, work_date)
        if record is None or record.check_in_time is None:
            raise InvariantViolation(
                f"departure for worker {worker.worker_id} on {work_date} has no recorded arrival"
            )

        ok = self._attendance.update_departure(
            attendance_id=record.attendance_id,
            check_out_time=timestamp,
            status=AttendanceStatus.OUT,
            scanner_id=scanner_id,
        )
        if not ok:
            raise InvariantViolation(f"attendance record {record.attendance_id} vanished during departure")

        updated = self._attendance.get_for_worker_and_date(worker.worker_id, work_date)
        if updated is None:
            raise InvariantViolation(f"attendance record {record.attendance_id} vanished during departure")
        return updated
