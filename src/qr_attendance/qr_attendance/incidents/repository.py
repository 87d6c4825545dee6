from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from ..core.enums import IncidentType


class IncidentRepository(Protocol):
    def add(
        self,
        *,
        incident_type: IncidentType,
        description: str,
        occurred_at: datetime,
        worker_id: Optional[int] = None,
        owner_id: Optional[int] = None,
        scanner_id: Optional[int] = None,
    ) -> int:
        raise NotImplementedError
