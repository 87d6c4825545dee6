from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..common.datetime_utils import from_utc_naive, to_utc_naive
from ..core.enums import DeliveryStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import DeliveryAttempt
from .repository import DeliveryRepository

_COLUMNS = "attempt_id, token_id, worker_id, owner_id, recipient, status, retry_count, error_message, sent_at"


def _to_attempt(r: Dict[str, Any]) -> DeliveryAttempt:
    return DeliveryAttempt(
        attempt_id=int(r["attempt_id"]),
        token_id=int(r["token_id"]),
        worker_id=int(r["worker_id"]),
        owner_id=int(r["owner_id"]),
        recipient=r["recipient"],
        status=DeliveryStatus(r["status"]),
        retry_count=int(r["retry_count"]),
        error_message=r.get("error_message"),
        sent_at=from_utc_naive(r.get("sent_at")),
    )


class MySQLDeliveryRepository(DeliveryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_token(self, token_id: int) -> Optional[DeliveryAttempt]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM token_deliveries WHERE token_id=%s", (int(token_id),))
            r = fetchone(cur)
            return _to_attempt(r) if r else None

    def save(
        self,
        *,
        token_id: int,
        worker_id: int,
        owner_id: int,
        recipient: str,
        status: DeliveryStatus,
        retry_count: int,
        error_message: Optional[str] = None,
        sent_at: Optional[datetime] = None,
    ) -> DeliveryAttempt:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO token_deliveries(token_id, worker_id, owner_id, recipient, status, retry_count, error_message, sent_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    recipient=VALUES(recipient),
                    status=VALUES(status),
                    retry_count=VALUES(retry_count),
                    error_message=VALUES(error_message),
                    sent_at=VALUES(sent_at)
                """,
                (
                    int(token_id),
                    int(worker_id),
                    int(owner_id),
                    recipient,
                    status.value,
                    int(retry_count),
                    error_message,
                    to_utc_naive(sent_at),
                ),
            )
            cur.execute(f"SELECT {_COLUMNS} FROM token_deliveries WHERE token_id=%s", (int(token_id),))
            return _to_attempt(fetchone(cur))

    def set_status(self, *, attempt_id: int, status: DeliveryStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE token_deliveries SET status=%s WHERE attempt_id=%s",
                (status.value, int(attempt_id)),
            )
            return cur.rowcount > 0

    def list_failed(self, *, max_retries: int, limit: int) -> Sequence[DeliveryAttempt]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM token_deliveries
                WHERE status=%s AND retry_count < %s AND recipient <> ''
                ORDER BY updated_at ASC
                LIMIT %s
                """,
                (DeliveryStatus.FAILED.value, int(max_retries), int(limit)),
            )
            return [_to_attempt(r) for r in fetchall(cur)]
