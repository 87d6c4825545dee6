from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

from ..common.datetime_utils import from_utc_naive, to_utc_naive
from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = (
    "attendance_id, worker_id, owner_id, work_date, check_in_time, check_out_time, "
    "status, is_late, scanner_id, note"
)


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        worker_id=int(r["worker_id"]),
        owner_id=int(r["owner_id"]),
        work_date=r["work_date"],
        check_in_time=from_utc_naive(r.get("check_in_time")),
        check_out_time=from_utc_naive(r.get("check_out_time")),
        status=AttendanceStatus(r["status"]),
        is_late=bool(r.get("is_late")),
        scanner_id=int(r["scanner_id"]) if r.get("scanner_id") is not None else None,
        note=r.get("note"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_worker_and_date(self, worker_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE worker_id=%s AND work_date=%s
                """,
                (int(worker_id), work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_recent_for_worker(self, worker_id: int, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE worker_id=%s
                ORDER BY work_date DESC
                LIMIT %s
                """,
                (int(worker_id), int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_owner_and_date(self, owner_id: int, work_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE owner_id=%s AND work_date=%s
                ORDER BY worker_id ASC
                """,
                (int(owner_id), work_date),
            )
            return [_to_record(r) for r in fetchall(cur)]

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(worker_id, owner_id, work_date, check_in_time, status, is_late, scanner_id)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    check_in_time=VALUES(check_in_time),
                    status=VALUES(status),
                    is_late=VALUES(is_late),
                    scanner_id=VALUES(scanner_id)
                """,
                (
                    int(worker_id),
                    int(owner_id),
                    work_date,
                    to_utc_naive(check_in_time),
                    status.value,
                    1 if is_late else 0,
                    scanner_id,
                ),
            )
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE worker_id=%s AND work_date=%s",
                (int(worker_id), work_date),
            )
            return _to_record(fetchone(cur))

    def update_departure(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        status: AttendanceStatus,
        scanner_id: Optional[int] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out_time=%s, status=%s, scanner_id=COALESCE(%s, scanner_id)
                WHERE attendance_id=%s AND check_in_time IS NOT NULL
                """,
                (to_utc_naive(check_out_time), status.value, scanner_id, int(attendance_id)),
            )
            return cur.rowcount > 0
