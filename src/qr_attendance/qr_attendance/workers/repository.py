from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Worker


class WorkerRepository(Protocol):
    """Giao diện repository cho Worker.

    Roster maintenance lives outside this package; only lookups are needed here.
    """

    def get_by_id(self, worker_id: int) -> Optional[Worker]:
        raise NotImplementedError

    def list_active(self, *, owner_id: Optional[int] = None) -> Sequence[Worker]:
        raise NotImplementedError
