from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import ActionType


@dataclass(frozen=True)
class Token:
    """Thực thể miền (domain): mã QR dùng một lần cho một hành động trong một ngày.

    Unique per (worker_id, work_date, action). Rows are never deleted; a forced
    re-issue overwrites the secret and window and clears the redemption mark.
    """

    token_id: int
    worker_id: int
    owner_id: int
    work_date: date
    action: ActionType
    secret: str
    valid_from: datetime
    valid_until: datetime
    redeemed_at: Optional[datetime] = None
    scanner_id: Optional[int] = None

    @property
    def is_redeemed(self) -> bool:
        return self.redeemed_at is not None

    def is_expired(self, now: datetime) -> bool:
        return now > self.valid_until
