from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

from ..common.datetime_utils import from_utc_naive, to_utc_naive
from ..core.enums import RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import PermissionRequest
from .repository import PermissionRepository

_COLUMNS = "request_id, worker_id, owner_id, request_date, reason, status, created_at, decided_at"


def _to_request(r: Dict[str, Any]) -> PermissionRequest:
    return PermissionRequest(
        request_id=int(r["request_id"]),
        worker_id=int(r["worker_id"]),
        owner_id=int(r["owner_id"]),
        request_date=r["request_date"],
        reason=r.get("reason"),
        status=RequestStatus(r["status"]),
        created_at=from_utc_naive(r.get("created_at")),
        decided_at=from_utc_naive(r.get("decided_at")),
    )


class MySQLPermissionRepository(PermissionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, worker_id: int, owner_id: int, request_date: date, reason: Optional[str]) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO permission_requests(worker_id, owner_id, request_date, reason, status)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(worker_id), int(owner_id), request_date, reason, RequestStatus.PENDING.value),
            )
            return int(cur.lastrowid)

    def get_by_id(self, request_id: int) -> Optional[PermissionRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM permission_requests WHERE request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return _to_request(r) if r else None

    def decide(self, *, request_id: int, status: RequestStatus, decided_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE permission_requests
                SET status=%s, decided_at=%s
                WHERE request_id=%s AND status=%s
                """,
                (status.value, to_utc_naive(decided_at), int(request_id), RequestStatus.PENDING.value),
            )
            return cur.rowcount == 1

    def list_approved_for_date(self, *, owner_id: int, request_date: date) -> Sequence[PermissionRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM permission_requests
                WHERE owner_id=%s AND request_date=%s AND status=%s
                """,
                (int(owner_id), request_date, RequestStatus.APPROVED.value),
            )
            return [_to_request(r) for r in fetchall(cur)]
