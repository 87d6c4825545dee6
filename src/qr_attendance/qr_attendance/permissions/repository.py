from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import RequestStatus
from .model import PermissionRequest


class PermissionRepository(Protocol):
    def create(self, *, worker_id: int, owner_id: int, request_date: date, reason: Optional[str]) -> int:
        raise NotImplementedError

    def get_by_id(self, request_id: int) -> Optional[PermissionRequest]:
        raise NotImplementedError

    def decide(self, *, request_id: int, status: RequestStatus, decided_at: datetime) -> bool:
        """Move a PENDING request to its final status; False when it was not pending."""

        raise NotImplementedError

    def list_approved_for_date(self, *, owner_id: int, request_date: date) -> Sequence[PermissionRequest]:
        raise NotImplementedError
