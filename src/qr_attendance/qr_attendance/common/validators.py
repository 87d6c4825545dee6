from __future__ import annotations

from typing import Any, Optional

from ..core.enums import ActionType
from ..core.exceptions import ValidationError


def require_int(value: Any, field_name: str) -> int:
    try:
        result = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")
    if result <= 0:
        raise ValidationError(f"{field_name} is invalid")
    return result


def optional_action(value: Optional[str], field_name: str = "actionType") -> Optional[ActionType]:
    if value is None or value == "":
        return None
    try:
        return ActionType(str(value).strip().lower())
    except ValueError:
        raise ValidationError(f"{field_name} must be 'arrival' or 'departure'")


def optional_bool(value: Any, field_name: str) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    raise ValidationError(f"{field_name} must be a boolean")
