from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional, Sequence

from ..common.clock import Clock
from ..core.constants import TOKEN_SECRET_BYTES
from ..core.enums import ActionType
from ..core.exceptions import TransientError, ValidationError
from ..delivery.model import DeliveryAttempt
from ..delivery.service import DeliveryService
from ..schedules.resolver import ScheduleResolver
from ..workers.model import Worker
from .model import Token
from .repository import TokenRepository
from .window import WindowPolicy, compute_window

logger = logging.getLogger(__name__)


def generate_secret() -> str:
    return secrets.token_urlsafe(TOKEN_SECRET_BYTES)


@dataclass(frozen=True)
class IssueResult:
    token: Token
    created: bool
    delivery: Optional[DeliveryAttempt] = None


class TokenIssuer:
    """Creates the per-day arrival/departure tokens of a worker.

    Issuing is idempotent per (worker, date, action): an existing token is returned
    as-is unless `force` is set, in which case its secret and window are replaced and
    the redemption mark is cleared.
    """

    def __init__(
        self,
        tokens: TokenRepository,
        resolver: ScheduleResolver,
        clock: Clock,
        *,
        policy: Optional[WindowPolicy] = None,
        delivery: Optional[DeliveryService] = None,
        secret_factory: Callable[[], str] = generate_secret,
    ):
        self._tokens = tokens
        self._resolver = resolver
        self._clock = clock
        self._policy = policy or WindowPolicy()
        self._delivery = delivery
        self._secret_factory = secret_factory

    def issue(self, worker: Worker, work_date: date, action: ActionType, *, force: bool = False) -> IssueResult:
        if not worker.is_active:
            raise ValidationError(f"worker {worker.worker_id} is inactive")

        existing = self._tokens.get_for_key(worker_id=worker.worker_id, work_date=work_date, action=action)
        if existing and not force:
            if existing.is_redeemed or not existing.is_expired(self._clock.now()):
                # Consumed tokens stay as they are for the audit trail.
                return IssueResult(token=existing, created=False, delivery=self._delivered(existing))

        schedule = self._resolver.resolve(worker, work_date)
        window = compute_window(
            action=action,
            schedule=schedule,
            work_date=work_date,
            tz=self._clock.tz,
            policy=self._policy,
        )
        token = self._tokens.save(
            worker_id=worker.worker_id,
            owner_id=worker.owner_id,
            work_date=work_date,
            action=action,
            secret=self._secret_factory(),
            valid_from=window.valid_from,
            valid_until=window.valid_until,
        )
        logger.info(
            "Token issued",
            extra={
                "token_id": token.token_id,
                "worker_id": worker.worker_id,
                "action": action.value,
                "work_date": work_date.isoformat(),
                "forced": force,
                "schedule_source": schedule.source,
            },
        )
        return IssueResult(token=token, created=True, delivery=self._deliver(token, worker, reset=existing is not None))

    def issue_for_worker(
        self,
        worker: Worker,
        work_date: Optional[date] = None,
        action: Optional[ActionType] = None,
        *,
        force: bool = False,
    ) -> Sequence[IssueResult]:
        """Issue one action type, or both when `action` is None."""

        work_date = work_date or self._clock.today()
        actions = [action] if action else [ActionType.ARRIVAL, ActionType.DEPARTURE]
        return [self.issue(worker, work_date, a, force=force) for a in actions]

    def _delivered(self, token: Token) -> Optional[DeliveryAttempt]:
        if not self._delivery:
            return None
        return self._delivery.get_attempt(token.token_id)

    def _deliver(self, token: Token, worker: Worker, *, reset: bool) -> Optional[DeliveryAttempt]:
        if not self._delivery:
            return None
        try:
            return self._delivery.deliver(token, worker, reset=reset)
        except TransientError:
            # The token row is committed; the attempt can be retried later.
            logger.exception("Token delivery failed", extra={"token_id": token.token_id})
            return None
