"""Consecutive-day attendance streaks.

Pure transition over a Member snapshot; the caller persists the result after
the attendance record is written.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime

from ..members.model import Member


def update_on_attendance(member: Member, attendance_timestamp: datetime) -> Member:
    """Apply one Present attendance at `attendance_timestamp` to the streak.

    Timestamps are naive local times, so `.date()` is the calendar day in the
    configured timezone. An attendance dated before the last one (clock skew,
    backdated marking) is treated like a second attendance on the same day.
    """
    today = attendance_timestamp.date()
    current = member.current_streak

    if member.last_attendance_date is None:
        current = 1
    else:
        days_diff = (today - member.last_attendance_date.date()).days
        if days_diff == 1:
            current += 1
        elif days_diff > 1:
            current = 1
        # days_diff <= 0: already counted

    return replace(
        member,
        current_streak=current,
        longest_streak=max(member.longest_streak, current),
        last_attendance_date=attendance_timestamp,
    )
