from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Staff roles used for authorization."""

    ADMIN = "admin"
    STAFF = "staff"


class AttendanceStatus(str, Enum):
    """Attendance status as stored in the database."""

    PRESENT = "Present"
    ABSENT = "Absent"


class AttendanceOrigin(str, Enum):
    """How an attendance record was created."""

    SELF = "self"
    STAFF = "staff"
