from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Scanner
from .repository import ScannerRepository


class MySQLScannerRepository(ScannerRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, scanner_id: int) -> Optional[Scanner]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT scanner_id, owner_id, name, location, is_active
                FROM scanners
                WHERE scanner_id=%s
                """,
                (int(scanner_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Scanner(
                scanner_id=int(r["scanner_id"]),
                owner_id=int(r["owner_id"]),
                name=r["name"],
                location=r.get("location"),
                is_active=bool(r.get("is_active", True)),
            )
