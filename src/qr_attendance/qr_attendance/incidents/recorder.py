from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..common.clock import Clock
from ..core.enums import IncidentType
from ..workers.model import Worker
from .repository import IncidentRepository

logger = logging.getLogger(__name__)


class IncidentRecorder:
    """Appends audit entries without ever failing the caller.

    An incident write that fails is logged and dropped: the attendance transaction it
    describes may already be committed.
    """

    def __init__(self, incidents: IncidentRepository, clock: Clock):
        self._incidents = incidents
        self._clock = clock

    def record(
        self,
        incident_type: IncidentType,
        worker: Optional[Worker],
        description: str,
        *,
        scanner_id: Optional[int] = None,
        occurred_at: Optional[datetime] = None,
    ) -> Optional[int]:
        try:
            incident_id = self._incidents.add(
                incident_type=incident_type,
                description=description,
                occurred_at=occurred_at or self._clock.now(),
                worker_id=worker.worker_id if worker else None,
                owner_id=worker.owner_id if worker else None,
                scanner_id=scanner_id,
            )
        except Exception:
            logger.exception(
                "Unable to record incident",
                extra={"incident_type": incident_type.value, "worker_id": worker.worker_id if worker else None},
            )
            return None

        logger.info(
            "Incident recorded: %s",
            incident_type.value,
            extra={"incident_id": incident_id, "worker_id": worker.worker_id if worker else None},
        )
        return incident_id
