from __future__ import annotations

from typing import Optional

from .enums import RejectionReason


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when the caller does not own the target tenant."""


class NotFoundError(DomainError):
    """Raised when a referenced worker/token/request does not exist."""


class RedemptionRejected(DomainError):
    """A presented token failed one of the ordered redemption checks.

    The matching incident has already been recorded when this is raised.
    """

    def __init__(self, reason: RejectionReason, message: str, *, worker_name: Optional[str] = None):
        super().__init__(message)
        self.reason = reason
        self.worker_name = worker_name
        self.incident_logged = True


class TransientError(Exception):
    """Infrastructure failure (datastore down, mail relay unreachable)."""


class InvariantViolation(RuntimeError):
    """Internal state contradicts a guarantee the redemption checks should enforce."""
