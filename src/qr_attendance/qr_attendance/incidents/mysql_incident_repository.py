from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..common.datetime_utils import to_utc_naive
from ..core.enums import IncidentType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .repository import IncidentRepository


class MySQLIncidentRepository(IncidentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add(
        self,
        *,
        incident_type: IncidentType,
        description: str,
        occurred_at: datetime,
        worker_id: Optional[int] = None,
        owner_id: Optional[int] = None,
        scanner_id: Optional[int] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO incidents(incident_type, description, occurred_at, worker_id, owner_id, scanner_id)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (incident_type.value, description, to_utc_naive(occurred_at), worker_id, owner_id, scanner_id),
            )
            return int(cur.lastrowid)
