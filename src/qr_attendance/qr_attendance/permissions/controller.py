from __future__ import annotations

from flask import Flask, jsonify

from ..common.datetime_utils import isoformat, parse_iso_date
from ..common.validators import require_int
from ..common.web import admin_required, current_owner_id, error_response, json_body
from ..container import Container
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import PermissionRequest


def request_to_json(r: PermissionRequest) -> dict:
    return {
        "requestId": r.request_id,
        "workerId": r.worker_id,
        "requestDate": r.request_date.isoformat(),
        "reason": r.reason,
        "status": r.status.value,
        "decidedAt": isoformat(r.decided_at),
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/permission-requests", methods=["POST"], endpoint="submit_permission")
    @admin_required
    def submit_permission():
        try:
            data = json_body()
            worker_id = require_int(data.get("workerId"), "workerId")
            try:
                request_date = parse_iso_date(str(data.get("requestDate") or ""))
            except ValueError:
                raise ValidationError("requestDate must be YYYY-MM-DD")

            worker = container.workers_repo.get_by_id(worker_id)
            if worker is None:
                raise NotFoundError(f"worker {worker_id} not found")
            if worker.owner_id != current_owner_id():
                raise AuthorizationError("worker belongs to another tenant")

            created = container.permission_service.submit(worker, request_date, data.get("reason"))
            return jsonify(request_to_json(created)), 201
        except Exception as e:
            return error_response(e)

    @app.route("/permission-requests/<int:request_id>/decision", methods=["POST"], endpoint="decide_permission")
    @admin_required
    def decide_permission(request_id: int):
        try:
            data = json_body()
            approve = data.get("approve")
            if not isinstance(approve, bool):
                raise ValidationError("approve must be a boolean")

            decided = container.permission_service.decide(
                owner_id=current_owner_id(),
                request_id=request_id,
                approve=approve,
            )
            return jsonify(request_to_json(decided)), 200
        except Exception as e:
            return error_response(e)
