from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import NoReturn, Optional

from ..attendance.ledger import AttendanceLedger
from ..attendance.repository import AttendanceRepository
from ..common.clock import Clock
from ..common.datetime_utils import minute_of_day
from ..core.constants import DEFAULT_VERY_LATE_DEPARTURE_MINUTES
from ..core.enums import ActionType, AttendanceStatus, IncidentType, RejectionReason
from ..core.exceptions import RedemptionRejected, ValidationError
from ..incidents.recorder import IncidentRecorder
from ..scanners.repository import ScannerRepository
from ..schedules.resolver import ScheduleResolver
from ..workers.model import Worker
from ..workers.repository import WorkerRepository
from .model import Token
from .repository import TokenRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RedemptionResult:
    action: ActionType
    status: AttendanceStatus
    worker_id: int
    worker_name: str
    work_date: date
    timestamp: datetime
    is_late: bool = False
    is_early_departure: bool = False
    is_very_late: bool = False


def _masked(secret: str) -> str:
    return secret[:8] + "..."


class TokenRedeemer:
    """Turns a presented secret into exactly one attendance transition.

    Checks run in a fixed order and the first failing check decides the rejection
    reason; that is the only incident written for the attempt. The final step is a
    conditional write on the token, so of N concurrent scans of one token exactly one
    reaches the ledger and the others are rejected as replays.
    """

    def __init__(
        self,
        tokens: TokenRepository,
        workers: WorkerRepository,
        scanners: ScannerRepository,
        attendance: AttendanceRepository,
        ledger: AttendanceLedger,
        recorder: IncidentRecorder,
        resolver: ScheduleResolver,
        clock: Clock,
        *,
        very_late_minutes: int = DEFAULT_VERY_LATE_DEPARTURE_MINUTES,
    ):
        self._tokens = tokens
        self._workers = workers
        self._scanners = scanners
        self._attendance = attendance
        self._ledger = ledger
        self._recorder = recorder
        self._resolver = resolver
        self._clock = clock
        self._very_late_minutes = int(very_late_minutes)

    def redeem(
        self,
        secret: str,
        scanner_id: Optional[int] = None,
        *,
        expected_action: Optional[ActionType] = None,
    ) -> RedemptionResult:
        if not secret or not secret.strip():
            raise ValidationError("secret is required")
        secret = secret.strip()
        now = self._clock.now()

        token = self._tokens.get_by_secret(secret)
        if token is None:
            self._reject(
                RejectionReason.INVALID_TOKEN,
                None,
                f"unknown token {_masked(secret)}",
                scanner_id=scanner_id,
                now=now,
            )

        worker = self._workers.get_by_id(token.worker_id)
        if worker is None:
            # A token whose worker row is gone is as good as unknown.
            self._reject(
                RejectionReason.INVALID_TOKEN,
                None,
                f"token {token.token_id} references missing worker {token.worker_id}",
                scanner_id=scanner_id,
                now=now,
            )

        if scanner_id is not None:
            scanner = self._scanners.get_by_id(scanner_id)
            if scanner is None or not scanner.is_active or scanner.owner_id != token.owner_id:
                self._reject(
                    RejectionReason.INVALID_SCANNER,
                    worker,
                    f"scanner {scanner_id} is unknown, inactive or belongs to another tenant",
                    scanner_id=None,
                    now=now,
                )

        if not worker.is_active:
            self._reject(RejectionReason.INACTIVE_WORKER, worker, "worker is inactive", scanner_id=scanner_id, now=now)

        today = now.date()
        if token.work_date != today:
            self._reject(
                RejectionReason.EXPIRED_TOKEN,
                worker,
                f"token is for {token.work_date.isoformat()}, scanned on {today.isoformat()}",
                scanner_id=scanner_id,
                now=now,
            )

        if token.is_redeemed:
            self._reject(RejectionReason.REPLAY, worker, "token already used", scanner_id=scanner_id, now=now)

        if now < token.valid_from:
            self._reject(
                RejectionReason.EARLY_SCAN,
                worker,
                f"token valid from {token.valid_from.astimezone(self._clock.tz).strftime('%H:%M')}",
                scanner_id=scanner_id,
                now=now,
            )
        if now > token.valid_until:
            self._reject(
                RejectionReason.EXPIRED_TOKEN,
                worker,
                f"token expired at {token.valid_until.astimezone(self._clock.tz).strftime('%H:%M')}",
                scanner_id=scanner_id,
                now=now,
            )

        self._check_logical_order(token, worker, expected_action, scanner_id=scanner_id, now=now)

        if not self._tokens.mark_redeemed(token_id=token.token_id, redeemed_at=now, scanner_id=scanner_id):
            self._reject(RejectionReason.REPLAY, worker, "token already used", scanner_id=scanner_id, now=now)

        logger.info(
            "Token redeemed",
            extra={
                "token_id": token.token_id,
                "worker_id": worker.worker_id,
                "action": token.action.value,
                "secret_prefix": secret[:8],
            },
        )

        try:
            if token.action == ActionType.ARRIVAL:
                return self._arrive(token, worker, now, scanner_id=scanner_id)
            return self._depart(token, worker, now, scanner_id=scanner_id)
        except Exception:
            self._release(token, now)
            raise

    def _release(self, token: Token, now: datetime) -> None:
        """Hand the token back after the ledger write failed, so a retry can redeem it."""

        try:
            released = self._tokens.release_redemption(token_id=token.token_id, redeemed_at=now)
        except Exception:
            logger.exception("Could not release token after ledger failure", extra={"token_id": token.token_id})
            return
        logger.warning(
            "Ledger write failed, token released",
            extra={"token_id": token.token_id, "released": released},
        )

    def _check_logical_order(
        self,
        token: Token,
        worker: Worker,
        expected_action: Optional[ActionType],
        *,
        scanner_id: Optional[int],
        now: datetime,
    ) -> None:
        if expected_action is not None and expected_action != token.action:
            self._reject(
                RejectionReason.WRONG_ACTION,
                worker,
                f"token is for {token.action.value}, scanner expects {expected_action.value}",
                scanner_id=scanner_id,
                now=now,
            )

        record = self._attendance.get_for_worker_and_date(worker.worker_id, token.work_date)
        if token.action == ActionType.ARRIVAL:
            if record is not None and record.check_in_time is not None:
                self._reject(
                    RejectionReason.ALREADY_CHECKED_IN,
                    worker,
                    "arrival already recorded",
                    scanner_id=scanner_id,
                    now=now,
                )
            return

        if record is None or record.check_in_time is None:
            self._reject(
                RejectionReason.MISSING_CHECKIN,
                worker,
                "departure without a recorded arrival",
                scanner_id=scanner_id,
                now=now,
            )
        if record.check_out_time is not None:
            self._reject(
                RejectionReason.ALREADY_CHECKED_OUT,
                worker,
                "departure already recorded",
                scanner_id=scanner_id,
                now=now,
            )

    def _arrive(self, token: Token, worker: Worker, now: datetime, *, scanner_id: Optional[int]) -> RedemptionResult:
        schedule = self._resolver.resolve(worker, token.work_date)
        deadline = minute_of_day(schedule.start_time) + schedule.late_grace_minutes
        is_late = minute_of_day(now) > deadline

        record = self._ledger.apply_arrival(worker, token.work_date, now, is_late, scanner_id=scanner_id)
        if is_late:
            self._recorder.record(
                IncidentType.LATE_ARRIVAL,
                worker,
                f"arrived {minute_of_day(now) - minute_of_day(schedule.start_time)} min after {schedule.start_time.strftime('%H:%M')}",
                scanner_id=scanner_id,
                occurred_at=now,
            )

        return RedemptionResult(
            action=token.action,
            status=record.status,
            worker_id=worker.worker_id,
            worker_name=worker.name,
            work_date=token.work_date,
            timestamp=now,
            is_late=is_late,
        )

    def _depart(self, token: Token, worker: Worker, now: datetime, *, scanner_id: Optional[int]) -> RedemptionResult:
        schedule = self._resolver.resolve(worker, token.work_date)
        end = minute_of_day(schedule.end_time)
        minute = minute_of_day(now)
        is_early = minute < end
        is_very_late = minute > end + self._very_late_minutes

        record = self._ledger.apply_departure(worker, token.work_date, now, scanner_id=scanner_id)
        if is_early:
            self._recorder.record(
                IncidentType.EARLY_DEPARTURE,
                worker,
                f"left {end - minute} min before {schedule.end_time.strftime('%H:%M')}",
                scanner_id=scanner_id,
                occurred_at=now,
            )
        elif is_very_late:
            self._recorder.record(
                IncidentType.VERY_LATE_DEPARTURE,
                worker,
                f"left {minute - end} min after {schedule.end_time.strftime('%H:%M')}",
                scanner_id=scanner_id,
                occurred_at=now,
            )

        return RedemptionResult(
            action=token.action,
            status=record.status,
            worker_id=worker.worker_id,
            worker_name=worker.name,
            work_date=token.work_date,
            timestamp=now,
            is_late=record.is_late,
            is_early_departure=is_early,
            is_very_late=is_very_late,
        )

    def _reject(
        self,
        reason: RejectionReason,
        worker: Optional[Worker],
        description: str,
        *,
        scanner_id: Optional[int],
        now: datetime,
    ) -> NoReturn:
        self._recorder.record(
            IncidentType.for_rejection(reason),
            worker,
            description,
            scanner_id=scanner_id,
            occurred_at=now,
        )
        logger.info(
            "Redemption rejected: %s",
            reason.value,
            extra={"worker_id": worker.worker_id if worker else None, "scanner_id": scanner_id},
        )
        raise RedemptionRejected(reason, description, worker_name=worker.name if worker else None)
