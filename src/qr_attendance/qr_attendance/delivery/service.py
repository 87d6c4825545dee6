from __future__ import annotations

import logging
from typing import Optional, Sequence
from urllib.parse import urlencode

from ..common.clock import Clock
from ..core.constants import DEFAULT_DELIVERY_MAX_RETRIES
from ..core.enums import DeliveryStatus
from ..tokens.model import Token
from ..tokens.repository import TokenRepository
from ..workers.model import Worker
from ..workers.repository import WorkerRepository
from .model import DeliveryAttempt, DeliveryMessage, DeliveryOutcome
from .repository import DeliveryRepository
from .sinks import DeliverySink

logger = logging.getLogger(__name__)

NO_EMAIL_ERROR = "worker has no email address"


class DeliveryService:
    """Sends issued tokens to workers and tracks one attempt row per token.

    Retries are bounded by max_retries and counted on the attempt row.
    """

    def __init__(
        self,
        deliveries: DeliveryRepository,
        sink: DeliverySink,
        clock: Clock,
        tokens: TokenRepository,
        workers: WorkerRepository,
        *,
        app_url: str,
        max_retries: int = DEFAULT_DELIVERY_MAX_RETRIES,
    ):
        self._deliveries = deliveries
        self._sink = sink
        self._clock = clock
        self._tokens = tokens
        self._workers = workers
        self._app_url = app_url.rstrip("/")
        self._max_retries = int(max_retries)

    def scan_url(self, token: Token) -> str:
        return f"{self._app_url}/scan?{urlencode({'token': token.secret})}"

    def build_message(self, token: Token, worker: Worker) -> DeliveryMessage:
        return DeliveryMessage(
            recipient=worker.email or "",
            worker_name=worker.name,
            action=token.action,
            work_date=token.work_date,
            scan_url=self.scan_url(token),
            valid_from=token.valid_from,
            valid_until=token.valid_until,
        )

    def deliver(self, token: Token, worker: Worker, *, retry: bool = False, reset: bool = False) -> DeliveryAttempt:
        """Send a token once; `reset` starts a fresh attempt for a re-issued secret."""

        existing = None if reset else self._deliveries.get_for_token(token.token_id)

        if not worker.email:
            logger.warning("Worker has no email, token not delivered", extra={"worker_id": worker.worker_id})
            return self._deliveries.save(
                token_id=token.token_id,
                worker_id=worker.worker_id,
                owner_id=worker.owner_id,
                recipient="",
                status=DeliveryStatus.FAILED,
                retry_count=existing.retry_count if existing else 0,
                error_message=NO_EMAIL_ERROR,
            )

        retry_count = 0
        if existing:
            if not retry:
                return existing
            if existing.retry_count >= self._max_retries:
                logger.warning(
                    "Max delivery retries reached",
                    extra={"token_id": token.token_id, "max_retries": self._max_retries},
                )
                return existing
            self._deliveries.set_status(attempt_id=existing.attempt_id, status=DeliveryStatus.RETRYING)
            retry_count = existing.retry_count + 1

        outcome = self._send(self.build_message(token, worker))
        attempt = self._deliveries.save(
            token_id=token.token_id,
            worker_id=worker.worker_id,
            owner_id=worker.owner_id,
            recipient=worker.email,
            status=DeliveryStatus.SENT if outcome.sent else DeliveryStatus.FAILED,
            retry_count=retry_count,
            error_message=outcome.error,
            sent_at=self._clock.now() if outcome.sent else None,
        )
        logger.info(
            "Token delivery %s",
            attempt.status.value,
            extra={"token_id": token.token_id, "worker_id": worker.worker_id, "retry_count": retry_count},
        )
        return attempt

    def retry_failed(self, *, limit: int = 50) -> Sequence[DeliveryAttempt]:
        """Retry failed deliveries whose tokens can still be used."""

        now = self._clock.now()
        results: list[DeliveryAttempt] = []
        for attempt in self._deliveries.list_failed(max_retries=self._max_retries, limit=limit):
            token = self._tokens.get_by_id(attempt.token_id)
            if token is None or token.is_redeemed or token.is_expired(now):
                continue
            worker = self._workers.get_by_id(token.worker_id)
            if worker is None or not worker.is_active:
                continue
            results.append(self.deliver(token, worker, retry=True))
        return results

    def _send(self, message: DeliveryMessage) -> DeliveryOutcome:
        try:
            return self._sink.send(message)
        except Exception as e:
            logger.exception("Delivery sink raised", extra={"recipient": message.recipient})
            return DeliveryOutcome(sent=False, error=str(e) or e.__class__.__name__)

    def get_attempt(self, token_id: int) -> Optional[DeliveryAttempt]:
        return self._deliveries.get_for_token(token_id)
