from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from ..common.clock import Clock
from ..core.enums import RequestStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..workers.model import Worker
from .model import PermissionRequest
from .repository import PermissionRepository

logger = logging.getLogger(__name__)


class PermissionService:
    def __init__(self, permissions: PermissionRepository, clock: Clock):
        self._permissions = permissions
        self._clock = clock

    def submit(self, worker: Worker, request_date: date, reason: Optional[str] = None) -> PermissionRequest:
        if not worker.is_active:
            raise ValidationError("Nhân viên đã ngừng hoạt động")

        note = (reason or "").strip() or None
        request_id = self._permissions.create(
            worker_id=worker.worker_id,
            owner_id=worker.owner_id,
            request_date=request_date,
            reason=note,
        )
        logger.info("Permission request submitted", extra={"request_id": request_id, "worker_id": worker.worker_id})
        created = self._permissions.get_by_id(request_id)
        if created is None:
            raise NotFoundError(f"permission request {request_id} not found")
        return created

    def decide(self, *, owner_id: int, request_id: int, approve: bool) -> PermissionRequest:
        req = self._permissions.get_by_id(request_id)
        if req is None:
            raise NotFoundError(f"permission request {request_id} not found")
        if req.owner_id != int(owner_id):
            raise AuthorizationError("Bạn không có quyền")
        if req.status != RequestStatus.PENDING:
            raise ValidationError("Yêu cầu đã được xử lý")

        status = RequestStatus.APPROVED if approve else RequestStatus.REJECTED
        if not self._permissions.decide(request_id=request_id, status=status, decided_at=self._clock.now()):
            # Decided concurrently by another admin.
            raise ValidationError("Yêu cầu đã được xử lý")

        logger.info("Permission request %s", status.value.lower(), extra={"request_id": request_id})
        decided = self._permissions.get_by_id(request_id)
        if decided is None:
            raise NotFoundError(f"permission request {request_id} not found")
        return decided
