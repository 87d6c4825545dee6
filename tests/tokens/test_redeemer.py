from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, time

import pytest

from qr_attendance.core.enums import ActionType, AttendanceStatus, IncidentType, RejectionReason
from qr_attendance.core.exceptions import RedemptionRejected, TransientError, ValidationError
from qr_attendance.scanners.model import Scanner

DAY = date(2026, 3, 2)


def _issue(container, worker, action=ActionType.ARRIVAL, **kw):
    return container.token_issuer.issue(worker, DAY, action, **kw).token


def _rejected(container, secret, **kw) -> RedemptionRejected:
    with pytest.raises(RedemptionRejected) as exc:
        container.token_redeemer.redeem(secret, **kw)
    return exc.value


def test_arrival_at_0920_succeeds_then_replay_is_rejected(container, repos, clock, worker):
    token = _issue(container, worker)
    assert token.valid_from == datetime(2026, 3, 2, 8, 30, tzinfo=clock.tz)
    assert token.valid_until == datetime(2026, 3, 2, 11, 0, tzinfo=clock.tz)
    clock.set(datetime(2026, 3, 2, 9, 20))

    result = container.token_redeemer.redeem(token.secret)

    assert result.action == ActionType.ARRIVAL
    # 09:20 is past 09:00 + 15 min grace
    assert result.is_late is True
    assert result.worker_name == "Abebe Kebede"

    err = _rejected(container, token.secret)
    assert err.reason == RejectionReason.REPLAY
    assert err.incident_logged is True
    assert repos.incidents.types() == [IncidentType.LATE_ARRIVAL, IncidentType.REPLAY]


def test_arrival_at_0916_is_late(container, repos, clock, worker):
    token = _issue(container, worker)
    clock.set(datetime(2026, 3, 2, 9, 16))

    result = container.token_redeemer.redeem(token.secret)

    assert result.is_late is True
    assert result.status == AttendanceStatus.LATE
    record = repos.attendance.get_for_worker_and_date(worker.worker_id, DAY)
    assert record.status == AttendanceStatus.LATE
    assert record.is_late is True


@pytest.mark.parametrize(
    "at, late",
    [
        (time(9, 15), False),
        (time(9, 15, 59), False),
        (time(9, 16), True),
        (time(8, 45), False),
    ],
)
def test_lateness_boundary_is_start_plus_grace(container, clock, worker, at, late):
    token = _issue(container, worker)
    clock.set(datetime.combine(DAY, at))

    result = container.token_redeemer.redeem(token.secret)

    assert result.is_late is late
    assert result.status == (AttendanceStatus.LATE if late else AttendanceStatus.IN)


@pytest.mark.parametrize(
    "at, reason",
    [
        (time(8, 29), RejectionReason.EARLY_SCAN),
        (time(11, 0, 1), RejectionReason.EXPIRED_TOKEN),
    ],
)
def test_scan_outside_window_is_rejected_and_token_stays_unused(container, repos, clock, worker, at, reason):
    token = _issue(container, worker)
    clock.set(datetime.combine(DAY, at))

    err = _rejected(container, token.secret)

    assert err.reason == reason
    assert repos.tokens.get_by_id(token.token_id).redeemed_at is None
    assert repos.attendance.rows == {}


def test_used_token_outside_window_is_still_rejected(container, clock, worker):
    token = _issue(container, worker)
    clock.set(datetime(2026, 3, 2, 9, 0))
    container.token_redeemer.redeem(token.secret)
    clock.set(datetime(2026, 3, 2, 12, 0))

    assert _rejected(container, token.secret).reason == RejectionReason.REPLAY


def test_token_for_another_day_is_expired(container, clock, worker):
    token = _issue(container, worker)
    clock.set(datetime(2026, 3, 3, 9, 0))

    assert _rejected(container, token.secret).reason == RejectionReason.EXPIRED_TOKEN


def test_unknown_secret_is_invalid_and_logged_without_worker(container, repos):
    err = _rejected(container, "not-a-real-secret")

    assert err.reason == RejectionReason.INVALID_TOKEN
    assert err.worker_name is None
    (incident,) = repos.incidents.rows
    assert incident.incident_type == IncidentType.INVALID_TOKEN
    assert incident.worker_id is None
    assert "not-a-real-secret" not in incident.description


def test_blank_secret_is_a_validation_error_without_incident(container, repos):
    with pytest.raises(ValidationError):
        container.token_redeemer.redeem("   ")

    assert repos.incidents.rows == []


@pytest.mark.parametrize(
    "scanner_row",
    [
        None,
        Scanner(scanner_id=5, owner_id=10, name="Front door", is_active=False),
        Scanner(scanner_id=5, owner_id=99, name="Other tenant"),
    ],
)
def test_scanner_must_be_known_active_and_same_tenant(container, repos, clock, worker, scanner_row):
    if scanner_row is None:
        repos.scanners.rows.clear()
    else:
        repos.scanners.rows[5] = scanner_row
    token = _issue(container, worker)
    clock.set(datetime(2026, 3, 2, 9, 0))

    err = _rejected(container, token.secret, scanner_id=5)

    assert err.reason == RejectionReason.INVALID_SCANNER
    assert err.worker_name == worker.name


def test_valid_scanner_is_stored_on_record(container, repos, clock, worker):
    token = _issue(container, worker)
    clock.set(datetime(2026, 3, 2, 9, 0))

    container.token_redeemer.redeem(token.secret, 5)

    assert repos.attendance.get_for_worker_and_date(worker.worker_id, DAY).scanner_id == 5
    assert repos.tokens.get_by_id(token.token_id).scanner_id == 5


def test_first_failing_check_is_the_only_incident(container, repos, clock, worker):
    token = _issue(container, worker)
    repos.workers.add(replace(worker, is_active=False))
    # wrong day as well, but the inactive worker check runs first
    clock.set(datetime(2026, 3, 3, 9, 0))

    err = _rejected(container, token.secret)

    assert err.reason == RejectionReason.INACTIVE_WORKER
    assert repos.incidents.types() == [IncidentType.INACTIVE_WORKER]


def test_departure_without_arrival_is_missing_checkin(container, repos, clock, worker):
    token = _issue(container, worker, ActionType.DEPARTURE)
    clock.set(datetime(2026, 3, 2, 18, 0))

    err = _rejected(container, token.secret)

    assert err.reason == RejectionReason.MISSING_CHECKIN
    assert repos.incidents.types() == [IncidentType.MISSING_CHECKIN]
    assert repos.attendance.rows == {}
    assert repos.tokens.get_by_id(token.token_id).redeemed_at is None


def test_second_arrival_for_the_day_is_already_checked_in(container, repos, clock, worker):
    first = _issue(container, worker)
    clock.set(datetime(2026, 3, 2, 9, 0))
    container.token_redeemer.redeem(first.secret)
    before = repos.attendance.get_for_worker_and_date(worker.worker_id, DAY)

    second = _issue(container, worker, force=True)
    clock.set(datetime(2026, 3, 2, 9, 30))
    err = _rejected(container, second.secret)

    assert err.reason == RejectionReason.ALREADY_CHECKED_IN
    assert repos.attendance.get_for_worker_and_date(worker.worker_id, DAY) == before


def test_expected_action_mismatch_is_wrong_action(container, clock, worker):
    token = _issue(container, worker)
    clock.set(datetime(2026, 3, 2, 9, 0))

    err = _rejected(container, token.secret, expected_action=ActionType.DEPARTURE)

    assert err.reason == RejectionReason.WRONG_ACTION


def _arrive(container, clock, worker, at=time(9, 0)):
    token = _issue(container, worker)
    clock.set(datetime.combine(DAY, at))
    return container.token_redeemer.redeem(token.secret)


def test_early_departure_keeps_lateness_and_logs_incident(container, repos, clock, worker):
    _arrive(container, clock, worker, time(9, 30))
    token = _issue(container, worker, ActionType.DEPARTURE)
    clock.set(datetime(2026, 3, 2, 17, 30))

    result = container.token_redeemer.redeem(token.secret)

    assert result.status == AttendanceStatus.OUT
    assert result.is_early_departure is True
    assert result.is_very_late is False
    assert result.is_late is True
    record = repos.attendance.get_for_worker_and_date(worker.worker_id, DAY)
    assert record.check_out_time == datetime(2026, 3, 2, 17, 30, tzinfo=clock.tz)
    assert record.is_late is True
    assert repos.incidents.types() == [IncidentType.LATE_ARRIVAL, IncidentType.EARLY_DEPARTURE]


@pytest.mark.parametrize("at, very_late", [(time(18, 30), False), (time(18, 31), True)])
def test_very_late_departure_threshold(container, repos, clock, worker, at, very_late):
    _arrive(container, clock, worker)
    token = _issue(container, worker, ActionType.DEPARTURE)
    clock.set(datetime.combine(DAY, at))

    result = container.token_redeemer.redeem(token.secret)

    assert result.is_early_departure is False
    assert result.is_very_late is very_late
    assert (IncidentType.VERY_LATE_DEPARTURE in repos.incidents.types()) is very_late


def test_second_departure_is_already_checked_out(container, clock, worker):
    _arrive(container, clock, worker)
    token = _issue(container, worker, ActionType.DEPARTURE)
    clock.set(datetime(2026, 3, 2, 18, 0))
    container.token_redeemer.redeem(token.secret)

    again = _issue(container, worker, ActionType.DEPARTURE, force=True)
    err = _rejected(container, again.secret)

    assert err.reason == RejectionReason.ALREADY_CHECKED_OUT


def test_losing_the_conditional_write_is_a_replay(container, repos, clock, worker):
    token = _issue(container, worker)
    clock.set(datetime(2026, 3, 2, 9, 0))
    original = repos.tokens.mark_redeemed

    def concurrent_winner(*, token_id, redeemed_at, scanner_id=None):
        # another request redeems between the checks and our write
        assert original(token_id=token_id, redeemed_at=redeemed_at, scanner_id=None)
        return original(token_id=token_id, redeemed_at=redeemed_at, scanner_id=scanner_id)

    repos.tokens.mark_redeemed = concurrent_winner

    err = _rejected(container, token.secret)

    assert err.reason == RejectionReason.REPLAY
    assert repos.attendance.rows == {}


def test_failed_arrival_write_hands_the_token_back(container, repos, clock, worker, monkeypatch):
    token = _issue(container, worker)
    clock.set(datetime(2026, 3, 2, 9, 5))

    def unavailable(**kwargs):
        raise TransientError("Database unavailable")

    with monkeypatch.context() as m:
        m.setattr(repos.attendance, "upsert_arrival", unavailable)
        with pytest.raises(TransientError):
            container.token_redeemer.redeem(token.secret)

    assert repos.tokens.get_by_id(token.token_id).redeemed_at is None
    assert repos.attendance.rows == {}

    result = container.token_redeemer.redeem(token.secret)

    assert result.action == ActionType.ARRIVAL
    assert result.is_late is False
    assert repos.tokens.get_by_id(token.token_id).redeemed_at == clock.now()
    assert len(repos.attendance.rows) == 1


def test_failed_departure_write_hands_the_token_back(container, repos, clock, worker, monkeypatch):
    _arrive(container, clock, worker)
    token = _issue(container, worker, ActionType.DEPARTURE)
    clock.set(datetime(2026, 3, 2, 18, 5))

    def unavailable(**kwargs):
        raise TransientError("Database unavailable")

    with monkeypatch.context() as m:
        m.setattr(repos.attendance, "update_departure", unavailable)
        with pytest.raises(TransientError):
            container.token_redeemer.redeem(token.secret)

    assert repos.tokens.get_by_id(token.token_id).redeemed_at is None

    result = container.token_redeemer.redeem(token.secret)

    assert result.status == AttendanceStatus.OUT


def test_release_leaves_a_newer_redemption_alone(repos, clock, worker):
    token = repos.tokens.save(
        worker_id=worker.worker_id,
        owner_id=worker.owner_id,
        work_date=DAY,
        action=ActionType.ARRIVAL,
        secret="s" * 43,
        valid_from=datetime(2026, 3, 2, 8, 30, tzinfo=clock.tz),
        valid_until=datetime(2026, 3, 2, 11, 0, tzinfo=clock.tz),
    )
    first = datetime(2026, 3, 2, 9, 0, tzinfo=clock.tz)
    assert repos.tokens.mark_redeemed(token_id=token.token_id, redeemed_at=first)

    assert not repos.tokens.release_redemption(token_id=token.token_id, redeemed_at=first.replace(minute=1))
    assert repos.tokens.get_by_id(token.token_id).redeemed_at == first
