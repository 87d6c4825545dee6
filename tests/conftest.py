from __future__ import annotations

import itertools
import threading
from dataclasses import replace
from datetime import date, datetime, time
from types import SimpleNamespace
from typing import Optional

import pytest

from qr_attendance.attendance.model import AttendanceRecord
from qr_attendance.common.clock import FixedClock
from qr_attendance.container import wire_container
from qr_attendance.core.enums import DeliveryStatus, RequestStatus
from qr_attendance.delivery.model import DeliveryAttempt, DeliveryOutcome
from qr_attendance.incidents.model import Incident
from qr_attendance.permissions.model import PermissionRequest
from qr_attendance.scanners.model import Scanner
from qr_attendance.schedules.model import DayOverride, ScheduleConfig
from qr_attendance.tokens.model import Token
from qr_attendance.workers.model import Worker

TZ_NAME = "Africa/Addis_Ababa"
# Monday
WORK_DATE = date(2026, 3, 2)


class InMemoryWorkerRepository:
    def __init__(self, workers=()):
        self.rows = {w.worker_id: w for w in workers}

    def add(self, worker: Worker) -> Worker:
        self.rows[worker.worker_id] = worker
        return worker

    def get_by_id(self, worker_id):
        return self.rows.get(int(worker_id))

    def list_active(self, *, owner_id=None):
        return [w for w in self.rows.values() if w.is_active and (owner_id is None or w.owner_id == owner_id)]


class InMemoryScannerRepository:
    def __init__(self, scanners=()):
        self.rows = {s.scanner_id: s for s in scanners}

    def get_by_id(self, scanner_id):
        return self.rows.get(int(scanner_id))


class InMemoryScheduleRepository:
    def __init__(self):
        self.configs: dict[int, ScheduleConfig] = {}
        self.overrides: dict[int, list[DayOverride]] = {}

    def get_config(self, *, owner_id):
        return self.configs.get(owner_id)

    def list_day_overrides(self, *, owner_id):
        return list(self.overrides.get(owner_id, []))


class InMemoryTokenRepository:
    """Token store whose conditional redeem is atomic under a lock, like a row update."""

    def __init__(self):
        self.rows: dict[int, Token] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def get_by_id(self, token_id):
        return self.rows.get(int(token_id))

    def get_by_secret(self, secret):
        return next((t for t in self.rows.values() if t.secret == secret), None)

    def get_for_key(self, *, worker_id, work_date, action):
        return next(
            (t for t in self.rows.values() if (t.worker_id, t.work_date, t.action) == (worker_id, work_date, action)),
            None,
        )

    def save(self, *, worker_id, owner_id, work_date, action, secret, valid_from, valid_until):
        with self._lock:
            existing = self.get_for_key(worker_id=worker_id, work_date=work_date, action=action)
            token_id = existing.token_id if existing else next(self._ids)
            token = Token(
                token_id=token_id,
                worker_id=worker_id,
                owner_id=owner_id,
                work_date=work_date,
                action=action,
                secret=secret,
                valid_from=valid_from,
                valid_until=valid_until,
            )
            self.rows[token_id] = token
            return token

    def mark_redeemed(self, *, token_id, redeemed_at, scanner_id=None):
        with self._lock:
            token = self.rows.get(int(token_id))
            if token is None or token.redeemed_at is not None:
                return False
            self.rows[token.token_id] = replace(token, redeemed_at=redeemed_at, scanner_id=scanner_id)
            return True

    def release_redemption(self, *, token_id, redeemed_at):
        with self._lock:
            token = self.rows.get(int(token_id))
            if token is None or token.redeemed_at != redeemed_at:
                return False
            self.rows[token.token_id] = replace(token, redeemed_at=None, scanner_id=None)
            return True


class InMemoryAttendanceRepository:
    def __init__(self):
        self.rows: dict[int, AttendanceRecord] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def get_for_worker_and_date(self, worker_id, work_date):
        return next((r for r in self.rows.values() if r.worker_id == worker_id and r.work_date == work_date), None)

    def get_recent_for_worker(self, worker_id, limit):
        rows = sorted((r for r in self.rows.values() if r.worker_id == worker_id), key=lambda r: r.work_date, reverse=True)
        return rows[:limit]

    def list_for_owner_and_date(self, owner_id, work_date):
        return [r for r in self.rows.values() if r.owner_id == owner_id and r.work_date == work_date]

    def upsert_arrival(self, *, worker_id, owner_id, work_date, check_in_time, status, is_late, scanner_id=None):
        with self._lock:
            existing = self.get_for_worker_and_date(worker_id, work_date)
            if existing:
                record = replace(existing, check_in_time=check_in_time, status=status, is_late=is_late, scanner_id=scanner_id)
            else:
                record = AttendanceRecord(
                    attendance_id=next(self._ids),
                    worker_id=worker_id,
                    owner_id=owner_id,
                    work_date=work_date,
                    check_in_time=check_in_time,
                    check_out_time=None,
                    status=status,
                    is_late=is_late,
                    scanner_id=scanner_id,
                )
            self.rows[record.attendance_id] = record
            return record

    def update_departure(self, *, attendance_id, check_out_time, status, scanner_id=None):
        with self._lock:
            record = self.rows.get(attendance_id)
            if record is None or record.check_in_time is None:
                return False
            self.rows[attendance_id] = replace(
                record,
                check_out_time=check_out_time,
                status=status,
                scanner_id=scanner_id if scanner_id is not None else record.scanner_id,
            )
            return True


class InMemoryIncidentRepository:
    def __init__(self):
        self.rows: list[Incident] = []
        self._lock = threading.Lock()

    def add(self, *, incident_type, description, occurred_at, worker_id=None, owner_id=None, scanner_id=None):
        with self._lock:
            incident = Incident(
                incident_id=len(self.rows) + 1,
                incident_type=incident_type,
                description=description,
                occurred_at=occurred_at,
                worker_id=worker_id,
                owner_id=owner_id,
                scanner_id=scanner_id,
            )
            self.rows.append(incident)
            return incident.incident_id

    def types(self):
        return [i.incident_type for i in self.rows]


class InMemoryDeliveryRepository:
    def __init__(self):
        self.rows: dict[int, DeliveryAttempt] = {}
        self._ids = itertools.count(1)
        self.status_history: list = []

    def get_for_token(self, token_id):
        return self.rows.get(int(token_id))

    def save(self, *, token_id, worker_id, owner_id, recipient, status, retry_count, error_message=None, sent_at=None):
        existing = self.rows.get(token_id)
        attempt = DeliveryAttempt(
            attempt_id=existing.attempt_id if existing else next(self._ids),
            token_id=token_id,
            worker_id=worker_id,
            owner_id=owner_id,
            recipient=recipient,
            status=status,
            retry_count=retry_count,
            error_message=error_message,
            sent_at=sent_at,
        )
        self.rows[token_id] = attempt
        self.status_history.append(status)
        return attempt

    def set_status(self, *, attempt_id, status):
        for token_id, attempt in self.rows.items():
            if attempt.attempt_id == attempt_id:
                self.rows[token_id] = replace(attempt, status=status)
                self.status_history.append(status)
                return True
        return False

    def list_failed(self, *, max_retries, limit):
        failed = [
            a for a in self.rows.values()
            if a.status == DeliveryStatus.FAILED and a.retry_count < max_retries and a.recipient
        ]
        return failed[:limit]


class InMemoryPermissionRepository:
    def __init__(self):
        self.rows: dict[int, PermissionRequest] = {}
        self._ids = itertools.count(1)

    def create(self, *, worker_id, owner_id, request_date, reason):
        rid = next(self._ids)
        self.rows[rid] = PermissionRequest(
            request_id=rid,
            worker_id=worker_id,
            owner_id=owner_id,
            request_date=request_date,
            reason=reason,
            status=RequestStatus.PENDING,
        )
        return rid

    def get_by_id(self, request_id):
        return self.rows.get(int(request_id))

    def decide(self, *, request_id, status, decided_at):
        req = self.rows.get(int(request_id))
        if req is None or req.status != RequestStatus.PENDING:
            return False
        self.rows[req.request_id] = replace(req, status=status, decided_at=decided_at)
        return True

    def list_approved_for_date(self, *, owner_id, request_date):
        return [
            r for r in self.rows.values()
            if r.owner_id == owner_id and r.request_date == request_date and r.status == RequestStatus.APPROVED
        ]


class RecordingSink:
    """Delivery sink that remembers messages; `fail_with` makes sends fail."""

    def __init__(self):
        self.messages = []
        self.fail_with: Optional[str] = None

    def send(self, message):
        self.messages.append(message)
        if self.fail_with:
            return DeliveryOutcome(sent=False, error=self.fail_with)
        return DeliveryOutcome(sent=True)


@pytest.fixture
def clock():
    return FixedClock(datetime(2026, 3, 2, 8, 0), TZ_NAME)


@pytest.fixture
def worker():
    return Worker(worker_id=1, owner_id=10, name="Abebe Kebede", email="abebe@example.com")


@pytest.fixture
def scanner():
    return Scanner(scanner_id=5, owner_id=10, name="Front door", location="Main entrance")


@pytest.fixture
def repos(worker, scanner):
    schedules = InMemoryScheduleRepository()
    schedules.configs[10] = ScheduleConfig(
        owner_id=10,
        default_start_time=time(9, 0),
        default_end_time=time(18, 0),
        late_grace_minutes=15,
    )
    return SimpleNamespace(
        workers=InMemoryWorkerRepository([worker]),
        scanners=InMemoryScannerRepository([scanner]),
        schedules=schedules,
        tokens=InMemoryTokenRepository(),
        attendance=InMemoryAttendanceRepository(),
        incidents=InMemoryIncidentRepository(),
        deliveries=InMemoryDeliveryRepository(),
        permissions=InMemoryPermissionRepository(),
    )


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def container(repos, clock, sink):
    return wire_container(
        workers=repos.workers,
        scanners=repos.scanners,
        schedules=repos.schedules,
        tokens=repos.tokens,
        attendance=repos.attendance,
        incidents=repos.incidents,
        deliveries=repos.deliveries,
        permissions=repos.permissions,
        clock=clock,
        sink=sink,
        app_url="http://testserver",
    )


@pytest.fixture
def app(container):
    from qr_attendance.main import create_app

    app = create_app(container, settings_module="qr_attendance.config.testing")
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(client):
    with client.session_transaction() as sess:
        sess["owner_id"] = 10
    return client
