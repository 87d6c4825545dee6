from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import DeliveryStatus
from .model import DeliveryAttempt


class DeliveryRepository(Protocol):
    def get_for_token(self, token_id: int) -> Optional[DeliveryAttempt]:
        raise NotImplementedError

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
        """Insert or replace the single attempt row of a token."""

        raise NotImplementedError

    def set_status(self, *, attempt_id: int, status: DeliveryStatus) -> bool:
        raise NotImplementedError

    def list_failed(self, *, max_retries: int, limit: int) -> Sequence[DeliveryAttempt]:
        """Failed attempts that still have retries left, oldest first."""

        raise NotImplementedError
