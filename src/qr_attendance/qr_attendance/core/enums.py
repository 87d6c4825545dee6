from __future__ import annotations

from enum import Enum


class ActionType(str, Enum):
    """Hành động chấm công gắn với một token."""

    ARRIVAL = "arrival"
    DEPARTURE = "departure"


class AttendanceStatus(str, Enum):
    """Trạng thái chấm công lưu trong CSDL."""

    IN = "in"
    LATE = "late"
    OUT = "out"
    ABSENT = "absent"


class DayStatus(str, Enum):
    """Trạng thái hiển thị trong báo cáo ngày (bao gồm ngày nghỉ/được phép)."""

    IN = "in"
    LATE = "late"
    OUT = "out"
    ABSENT = "absent"
    ON_BREAK = "on_break"
    ON_PERMISSION = "on_permission"


class RejectionReason(str, Enum):
    INVALID_TOKEN = "invalid_token"
    INVALID_SCANNER = "invalid_scanner"
    INACTIVE_WORKER = "inactive_worker"
    EXPIRED_TOKEN = "expired_token"
    REPLAY = "replay"
    EARLY_SCAN = "early_scan"
    WRONG_ACTION = "wrong_action"
    ALREADY_CHECKED_IN = "already_checked_in"
    MISSING_CHECKIN = "missing_checkin"
    ALREADY_CHECKED_OUT = "already_checked_out"


class IncidentType(str, Enum):
    """Loại sự cố; các lý do từ chối dùng chung giá trị với RejectionReason."""

    INVALID_TOKEN = "invalid_token"
    INVALID_SCANNER = "invalid_scanner"
    INACTIVE_WORKER = "inactive_worker"
    EXPIRED_TOKEN = "expired_token"
    REPLAY = "replay"
    EARLY_SCAN = "early_scan"
    WRONG_ACTION = "wrong_action"
    ALREADY_CHECKED_IN = "already_checked_in"
    MISSING_CHECKIN = "missing_checkin"
    ALREADY_CHECKED_OUT = "already_checked_out"
    LATE_ARRIVAL = "late_arrival"
    EARLY_DEPARTURE = "early_departure"
    VERY_LATE_DEPARTURE = "very_late_departure"

    @classmethod
    def for_rejection(cls, reason: RejectionReason) -> "IncidentType":
        return cls(reason.value)


class DeliveryStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"
    RETRYING = "retrying"


class RequestStatus(str, Enum):
    """Trạng thái luồng duyệt yêu cầu nghỉ có phép."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
