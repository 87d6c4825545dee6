from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_for_worker_and_date(self, worker_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_recent_for_worker(self, worker_id: int, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_owner_and_date(self, owner_id: int, work_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def upsert_arrival(
        self,
        *,
        worker_id: int,
        owner_id: int,
        work_date: date,
        check_in_time: datetime,
        status: AttendanceStatus,
        is_late: bool,
        scanner_id: Optional[int] = None,
    ) -> AttendanceRecord:
        """Create the daily record, or overwrite its arrival fields if one exists."""

        raise NotImplementedError

    def update_departure(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        status: AttendanceStatus,
        scanner_id: Optional[int] = None,
    ) -> bool:
        raise NotImplementedError
