from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import IncidentType


@dataclass(frozen=True)
class Incident:
    """Append-only audit entry; worker_id is None when the token resolved to nobody."""

    incident_id: int
    incident_type: IncidentType
    description: str
    occurred_at: datetime
    worker_id: Optional[int] = None
    owner_id: Optional[int] = None
    scanner_id: Optional[int] = None
