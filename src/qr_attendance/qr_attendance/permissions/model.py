from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import RequestStatus


@dataclass(frozen=True)
class PermissionRequest:
    """Yêu cầu nghỉ có phép cho một ngày; khi được duyệt, báo cáo ngày hiển thị on_permission."""

    request_id: int
    worker_id: int
    owner_id: int
    request_date: date
    reason: Optional[str]
    status: RequestStatus
    created_at: Optional[datetime] = None
    decided_at: Optional[datetime] = None
