from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import AttendanceOrigin, AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance record per (member, session), immutable."""

    attendance_id: int
    member_id: int
    session_id: int
    status: AttendanceStatus
    marked_at: datetime
    origin: AttendanceOrigin
    marked_by: Optional[int] = None
    ip_address: Optional[str] = None


@dataclass(frozen=True)
class SessionRosterRow:
    """Read-model for the session roster (record joined with member fields)."""

    attendance_id: int
    member_id: int
    registration_code: str
    full_name: str
    email: str
    year: Optional[str]
    gender: Optional[str]
    status: AttendanceStatus
    marked_at: datetime
    origin: AttendanceOrigin
    marked_by: Optional[int] = None
