from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional

from ..common.datetime_utils import from_utc_naive, to_utc_naive
from ..core.enums import ActionType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Token
from .repository import TokenRepository

_COLUMNS = "token_id, worker_id, owner_id, work_date, action, secret, valid_from, valid_until, redeemed_at, scanner_id"


def _to_token(r: Dict[str, Any]) -> Token:
    return Token(
        token_id=int(r["token_id"]),
        worker_id=int(r["worker_id"]),
        owner_id=int(r["owner_id"]),
        work_date=r["work_date"],
        action=ActionType(r["action"]),
        secret=r["secret"],
        valid_from=from_utc_naive(r["valid_from"]),
        valid_until=from_utc_naive(r["valid_until"]),
        redeemed_at=from_utc_naive(r.get("redeemed_at")),
        scanner_id=int(r["scanner_id"]) if r.get("scanner_id") is not None else None,
    )


def _stamp(value: datetime) -> datetime:
    # redeemed_at is DATETIME(0); whole seconds so release_redemption can match it exactly
    return to_utc_naive(value).replace(microsecond=0)


class MySQLTokenRepository(TokenRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, token_id: int) -> Optional[Token]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_tokens WHERE token_id=%s", (int(token_id),))
            r = fetchone(cur)
            return _to_token(r) if r else None

    def get_by_secret(self, secret: str) -> Optional[Token]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_tokens WHERE secret=%s", (secret,))
            r = fetchone(cur)
            return _to_token(r) if r else None

    def get_for_key(self, *, worker_id: int, work_date: date, action: ActionType) -> Optional[Token]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_tokens
                WHERE worker_id=%s AND work_date=%s AND action=%s
                """,
                (int(worker_id), work_date, action.value),
            )
            r = fetchone(cur)
            return _to_token(r) if r else None

    def save(
        self,
        *,
        worker_id: int,
        owner_id: int,
        work_date: date,
        action: ActionType,
        secret: str,
        valid_from: datetime,
        valid_until: datetime,
    ) -> Token:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_tokens(worker_id, owner_id, work_date, action, secret, valid_from, valid_until)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    secret=VALUES(secret),
                    valid_from=VALUES(valid_from),
                    valid_until=VALUES(valid_until),
                    redeemed_at=NULL,
                    scanner_id=NULL
                """,
                (
                    int(worker_id),
                    int(owner_id),
                    work_date,
                    action.value,
                    secret,
                    to_utc_naive(valid_from),
                    to_utc_naive(valid_until),
                ),
            )
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_tokens
                WHERE worker_id=%s AND work_date=%s AND action=%s
                """,
                (int(worker_id), work_date, action.value),
            )
            return _to_token(fetchone(cur))

    def mark_redeemed(self, *, token_id: int, redeemed_at: datetime, scanner_id: Optional[int] = None) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_tokens
                SET redeemed_at=%s, scanner_id=%s
                WHERE token_id=%s AND redeemed_at IS NULL
                """,
                (_stamp(redeemed_at), scanner_id, int(token_id)),
            )
            return cur.rowcount == 1

    def release_redemption(self, *, token_id: int, redeemed_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_tokens
                SET redeemed_at=NULL, scanner_id=NULL
                WHERE token_id=%s AND redeemed_at=%s
                """,
                (int(token_id), _stamp(redeemed_at)),
            )
            return cur.rowcount == 1
