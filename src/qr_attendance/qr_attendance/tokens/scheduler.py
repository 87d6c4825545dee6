from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from ..common.clock import Clock
from ..common.datetime_utils import day_of_week, minute_of_day
from ..core.constants import DEFAULT_SCHEDULE_TOLERANCE_MINUTES
from ..core.enums import ActionType
from ..core.exceptions import DomainError, TransientError
from ..schedules.resolver import ScheduleResolver
from ..workers.repository import WorkerRepository
from .issuer import IssueResult, TokenIssuer

logger = logging.getLogger(__name__)


class ScheduledIssuer:
    """Issues and sends tokens for workers whose shift boundary is due now.

    Meant to be run every minute or two from cron (see the `issue-scheduled` CLI
    command). Issuance is idempotent, so overlapping runs only send once.
    """

    def __init__(
        self,
        workers: WorkerRepository,
        resolver: ScheduleResolver,
        issuer: TokenIssuer,
        clock: Clock,
        *,
        tolerance_minutes: int = DEFAULT_SCHEDULE_TOLERANCE_MINUTES,
    ):
        self._workers = workers
        self._resolver = resolver
        self._issuer = issuer
        self._clock = clock
        self._tolerance = int(tolerance_minutes)

    def run(self, now: Optional[datetime] = None) -> List[IssueResult]:
        now = (now or self._clock.now()).astimezone(self._clock.tz)
        today = now.date()
        minute = minute_of_day(now)
        results: List[IssueResult] = []

        for worker in self._workers.list_active():
            if not worker.email:
                continue
            if worker.break_day is not None and worker.break_day == day_of_week(today):
                continue

            schedule = self._resolver.resolve(worker, today)
            due = []
            if abs(minute - minute_of_day(schedule.start_time)) <= self._tolerance:
                due.append(ActionType.ARRIVAL)
            if abs(minute - minute_of_day(schedule.end_time)) <= self._tolerance:
                due.append(ActionType.DEPARTURE)

            for action in due:
                try:
                    results.append(self._issuer.issue(worker, today, action))
                except DomainError as e:
                    logger.warning(
                        "Scheduled issuance skipped: %s",
                        e,
                        extra={"worker_id": worker.worker_id, "action": action.value},
                    )
                except TransientError:
                    logger.exception(
                        "Scheduled issuance failed",
                        extra={"worker_id": worker.worker_id, "action": action.value},
                    )

        logger.info("Scheduled issuance done", extra={"issued": len(results), "at": now.isoformat()})
        return results
