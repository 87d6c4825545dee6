from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus, DayStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Thực thể miền (domain): Bản ghi chấm công, duy nhất theo (worker, ngày)."""

    attendance_id: int
    worker_id: int
    owner_id: int
    work_date: date
    check_in_time: Optional[datetime]
    check_out_time: Optional[datetime]
    status: AttendanceStatus
    is_late: bool = False
    scanner_id: Optional[int] = None
    note: Optional[str] = None


@dataclass(frozen=True)
class DailyWorkerRow:
    """Read-model cho báo cáo ngày."""

    worker_id: int
    worker_name: str
    status: DayStatus
    check_in_time: Optional[datetime]
    check_out_time: Optional[datetime]
    is_late: bool
