from __future__ import annotations

from typing import Optional

from flask import Flask, jsonify

from ..common.datetime_utils import isoformat
from ..common.validators import optional_action, optional_bool, require_int
from ..common.web import admin_required, current_owner_id, error_response, json_body
from ..container import Container
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..delivery.model import DeliveryAttempt
from .issuer import IssueResult
from .redeemer import RedemptionResult



def delivery_to_json(attempt: Optional[DeliveryAttempt]) -> Optional[dict]:
    if attempt is None:
        return None
    return {
        "status": attempt.status.value,
        "recipient": attempt.recipient,
        "retryCount": attempt.retry_count,
        "errorMessage": attempt.error_message,
        "sentAt": isoformat(attempt.sent_at),
    }


def issue_to_json(result: IssueResult) -> dict:
    token = result.token
    return {
        "tokenId": token.token_id,
        "secret": token.secret,
        "actionType": token.action.value,
        "workDate": token.work_date.isoformat(),
        "validFrom": isoformat(token.valid_from),
        "validUntil": isoformat(token.valid_until),
        "created": result.created,
        "delivery": delivery_to_json(result.delivery),
    }


def redemption_to_json(result: RedemptionResult) -> dict:
    return {
        "action": result.action.value,
        "status": result.status.value,
        "workerName": result.worker_name,
        "isLate": result.is_late,
        "isEarlyDeparture": result.is_early_departure,
        "isVeryLate": result.is_very_late,
        "timestamp": isoformat(result.timestamp),
    }


def register(app: Flask, container: Container) -> None:
    def _owned_worker(worker_id: int):
        worker = container.workers_repo.get_by_id(worker_id)
        if worker is None:
            raise NotFoundError(f"worker {worker_id} not found")
        if worker.owner_id != current_owner_id():
            raise AuthorizationError("worker belongs to another tenant")
        return worker

    @app.route("/tokens/issue", methods=["POST"], endpoint="issue_tokens")
    @admin_required
    def issue_tokens():
        try:
            data = json_body()
            worker = _owned_worker(require_int(data.get("workerId"), "workerId"))
            action = optional_action(data.get("actionType"))
            force = optional_bool(data.get("force"), "force")

            results = container.token_issuer.issue_for_worker(worker, action=action, force=force)
            return jsonify([issue_to_json(r) for r in results]), 200
        except Exception as e:
            return error_response(e)

    @app.route("/tokens/redeem", methods=["POST"], endpoint="redeem_token")
    def redeem_token():
        try:
            data = json_body()
            secret = data.get("secret")
            if not isinstance(secret, str) or not secret.strip():
                raise ValidationError("secret is required")
            scanner_id = data.get("scannerId")
            if scanner_id is not None:
                scanner_id = require_int(scanner_id, "scannerId")
            expected = optional_action(data.get("expectedActionType"), "expectedActionType")

            result = container.token_redeemer.redeem(secret, scanner_id, expected_action=expected)
            return jsonify(redemption_to_json(result)), 200
        except Exception as e:
            return error_response(e)

    @app.route("/tokens/<int:token_id>/deliver", methods=["POST"], endpoint="deliver_token")
    @admin_required
    def deliver_token(token_id: int):
        try:
            data = json_body()
            retry = optional_bool(data.get("retry"), "retry")

            token = container.tokens_repo.get_by_id(token_id)
            if token is None:
                raise NotFoundError(f"token {token_id} not found")
            worker = _owned_worker(token.worker_id)
            if token.is_redeemed:
                raise ValidationError("token has already been used")

            attempt = container.delivery_service.deliver(token, worker, retry=retry)
            return jsonify(delivery_to_json(attempt)), 200
        except Exception as e:
            return error_response(e)
