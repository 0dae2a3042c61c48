from __future__ import annotations

from ..core.constants import MAX_CHILD_ID_LENGTH
from ..core.enums import AttendanceStatus
from ..core.exceptions import InvalidInputError, ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_child_id(value: object) -> str:
    """Kiosk short id: 1-8 ASCII digits."""
    text = str(value or "").strip()
    if not text or not text.isascii() or not text.isdigit() or len(text) > MAX_CHILD_ID_LENGTH:
        raise InvalidInputError(f"Student ID must be 1-{MAX_CHILD_ID_LENGTH} digits")
    return text


def require_status(value: object) -> AttendanceStatus:
    if isinstance(value, AttendanceStatus):
        return value
    try:
        return AttendanceStatus(str(value or "").strip().lower())
    except ValueError:
        raise InvalidInputError(f"Invalid attendance status: {value!r}")
