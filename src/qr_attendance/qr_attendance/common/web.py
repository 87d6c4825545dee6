from __future__ import annotations

import logging
from functools import wraps
from typing import Any

from flask import jsonify, request, session

from ..core.enums import RejectionReason
from ..core.exceptions import (
    AuthorizationError,
    DomainError,
    NotFoundError,
    RedemptionRejected,
    TransientError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_REJECTION_STATUS = {
    RejectionReason.INVALID_TOKEN: 404,
    RejectionReason.INACTIVE_WORKER: 403,
    RejectionReason.INVALID_SCANNER: 403,
}


def admin_required(view):
    """JSON guard: the session must carry the authenticated tenant's owner_id."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if session.get("owner_id") is None:
            return jsonify({"error": "authentication required"}), 401
        return view(*args, **kwargs)

    return wrapper


def current_owner_id() -> int:
    return int(session["owner_id"])


def json_body() -> dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("request body must be a JSON object")
    return data


def error_response(e: Exception):
    """Map a raised error to (json, status) without leaking internals."""

    if isinstance(e, RedemptionRejected):
        body = {"error": str(e), "reason": e.reason.value, "incidentLogged": e.incident_logged}
        if e.worker_name:
            body["workerName"] = e.worker_name
        return jsonify(body), _REJECTION_STATUS.get(e.reason, 400)
    if isinstance(e, ValidationError):
        return jsonify({"error": str(e)}), 400
    if isinstance(e, AuthorizationError):
        return jsonify({"error": str(e)}), 403
    if isinstance(e, NotFoundError):
        return jsonify({"error": str(e)}), 404
    if isinstance(e, DomainError):
        return jsonify({"error": str(e)}), 400
    if isinstance(e, TransientError):
        logger.warning("Transient failure serving %s: %s", request.path, e)
        return jsonify({"error": "service temporarily unavailable, please retry"}), 503

    logger.exception("Unhandled error serving %s", request.path)
    return jsonify({"error": "internal error"}), 500
