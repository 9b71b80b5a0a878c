from __future__ import annotations

from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def normalize_registration_code(value: str) -> str:
    """Registration codes are compared upper-cased."""
    return require_non_empty(value, "Registration code").upper()


def parse_status(value) -> AttendanceStatus:
    """Anything other than 'Absent' counts as present."""
    if isinstance(value, AttendanceStatus):
        return value
    if str(value or "").strip().lower() == AttendanceStatus.ABSENT.value.lower():
        return AttendanceStatus.ABSENT
    return AttendanceStatus.PRESENT
