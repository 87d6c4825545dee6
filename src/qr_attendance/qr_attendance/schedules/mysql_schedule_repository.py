from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import DayOverride, ScheduleConfig
from .repository import ScheduleRepository


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_config(self, *, owner_id: int) -> Optional[ScheduleConfig]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT owner_id, default_start_time, default_end_time, late_grace_minutes
                FROM settings
                WHERE owner_id=%s
                """,
                (int(owner_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return ScheduleConfig(
                owner_id=int(r["owner_id"]),
                default_start_time=normalize_mysql_time(r["default_start_time"]),
                default_end_time=normalize_mysql_time(r["default_end_time"]),
                late_grace_minutes=int(r["late_grace_minutes"]),
            )

    def list_day_overrides(self, *, owner_id: int) -> Sequence[DayOverride]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT owner_id, day_of_week, start_time, end_time, is_enabled
                FROM day_schedules
                WHERE owner_id=%s
                ORDER BY day_of_week ASC
                """,
                (int(owner_id),),
            )
            return [
                DayOverride(
                    owner_id=int(r["owner_id"]),
                    day_of_week=int(r["day_of_week"]),
                    start_time=normalize_mysql_time(r["start_time"]),
                    end_time=normalize_mysql_time(r["end_time"]),
                    is_enabled=bool(r["is_enabled"]),
                )
                for r in fetchall(cur)
            ]
