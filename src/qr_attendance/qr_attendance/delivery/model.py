from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import ActionType, DeliveryStatus


@dataclass(frozen=True)
class DeliveryAttempt:
    """Trạng thái gửi mã QR cho một token; retry_count lives here, not on the token."""

    attempt_id: int
    token_id: int
    worker_id: int
    owner_id: int
    recipient: str
    status: DeliveryStatus
    retry_count: int = 0
    error_message: Optional[str] = None
    sent_at: Optional[datetime] = None


@dataclass(frozen=True)
class DeliveryMessage:
    recipient: str
    worker_name: str
    action: ActionType
    work_date: date
    scan_url: str
    valid_from: datetime
    valid_until: datetime


@dataclass(frozen=True)
class DeliveryOutcome:
    sent: bool
    error: Optional[str] = None
