from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Member:
    """Domain entity: an enrolled member who checks in to sessions.

    Note: The directory owns the record; the attendance core only reads it and
    writes back the streak fields.
    """

    member_id: int
    registration_code: str
    full_name: str
    email: str
    gender: Optional[str] = None
    year: Optional[str] = None
    is_active: bool = True
    current_streak: int = 0
    longest_streak: int = 0
    last_attendance_date: Optional[datetime] = None
