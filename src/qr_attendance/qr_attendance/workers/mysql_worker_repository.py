from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import Worker
from .repository import WorkerRepository

_COLUMNS = "worker_id, owner_id, name, email, is_active, custom_start_time, custom_end_time, break_day"


def _to_worker(r: Dict[str, Any]) -> Worker:
    return Worker(
        worker_id=int(r["worker_id"]),
        owner_id=int(r["owner_id"]),
        name=r["name"],
        email=r.get("email"),
        is_active=bool(r.get("is_active", True)),
        custom_start_time=normalize_mysql_time(r.get("custom_start_time")),
        custom_end_time=normalize_mysql_time(r.get("custom_end_time")),
        break_day=int(r["break_day"]) if r.get("break_day") is not None else None,
    )


class MySQLWorkerRepository(WorkerRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, worker_id: int) -> Optional[Worker]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM workers WHERE worker_id=%s", (int(worker_id),))
            r = fetchone(cur)
            return _to_worker(r) if r else None

    def list_active(self, *, owner_id: Optional[int] = None) -> Sequence[Worker]:
        clauses = ["is_active=1"]
        params: list[object] = []
        if owner_id is not None:
            clauses.append("owner_id=%s")
            params.append(int(owner_id))

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM workers WHERE {where} ORDER BY worker_id", tuple(params))
            return [_to_worker(r) for r in fetchall(cur)]
