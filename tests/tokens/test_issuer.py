from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime

import pytest

from qr_attendance.core.enums import ActionType, DeliveryStatus
from qr_attendance.core.exceptions import ValidationError

DAY = date(2026, 3, 2)


def test_issue_creates_token_and_delivers_it(container, repos, sink, worker):
    result = container.token_issuer.issue(worker, DAY, ActionType.ARRIVAL)

    assert result.created is True
    assert len(result.token.secret) >= 43
    assert result.token.valid_from.hour == 8 and result.token.valid_from.minute == 30
    assert result.delivery.status == DeliveryStatus.SENT
    assert len(sink.messages) == 1
    assert sink.messages[0].scan_url == f"http://testserver/scan?token={result.token.secret}"


def test_issue_is_idempotent_while_token_is_live(container, repos, sink, worker):
    first = container.token_issuer.issue(worker, DAY, ActionType.ARRIVAL)
    second = container.token_issuer.issue(worker, DAY, ActionType.ARRIVAL)

    assert second.created is False
    assert second.token == first.token
    assert len(repos.tokens.rows) == 1
    assert len(sink.messages) == 1


def test_consumed_token_is_returned_unchanged_without_force(container, repos, clock, worker):
    first = container.token_issuer.issue(worker, DAY, ActionType.ARRIVAL)
    clock.set(datetime(2026, 3, 2, 9, 0))
    container.token_redeemer.redeem(first.token.secret)

    again = container.token_issuer.issue(worker, DAY, ActionType.ARRIVAL)

    assert again.created is False
    assert again.token.secret == first.token.secret
    assert again.token.is_redeemed


def test_expired_unused_token_is_replaced(container, clock, worker):
    first = container.token_issuer.issue(worker, DAY, ActionType.ARRIVAL)
    clock.set(datetime(2026, 3, 2, 11, 30))

    again = container.token_issuer.issue(worker, DAY, ActionType.ARRIVAL)

    assert again.created is True
    assert again.token.token_id == first.token.token_id
    assert again.token.secret != first.token.secret


def test_force_reissues_and_clears_redemption(container, repos, sink, clock, worker):
    first = container.token_issuer.issue(worker, DAY, ActionType.ARRIVAL)
    clock.set(datetime(2026, 3, 2, 9, 0))
    container.token_redeemer.redeem(first.token.secret)

    forced = container.token_issuer.issue(worker, DAY, ActionType.ARRIVAL, force=True)

    assert forced.created is True
    assert forced.token.secret != first.token.secret
    assert forced.token.redeemed_at is None
    assert repos.tokens.get_by_secret(first.token.secret) is None
    assert forced.delivery.retry_count == 0
    assert len(sink.messages) == 2


def test_issue_for_worker_without_action_issues_both(container, worker):
    results = container.token_issuer.issue_for_worker(worker, DAY)

    assert [r.token.action for r in results] == [ActionType.ARRIVAL, ActionType.DEPARTURE]
    assert results[1].token.valid_from.hour == 16


def test_issue_for_worker_defaults_to_clock_today(container, worker):
    (result,) = container.token_issuer.issue_for_worker(worker, action=ActionType.DEPARTURE)

    assert result.token.work_date == DAY


def test_inactive_worker_cannot_be_issued_a_token(container, worker):
    with pytest.raises(ValidationError):
        container.token_issuer.issue(replace(worker, is_active=False), DAY, ActionType.ARRIVAL)


def test_delivery_failure_does_not_fail_issuance(container, sink, worker):
    sink.fail_with = "relay unreachable"

    result = container.token_issuer.issue(worker, DAY, ActionType.ARRIVAL)

    assert result.created is True
    assert result.delivery.status == DeliveryStatus.FAILED
    assert result.delivery.error_message == "relay unreachable"
