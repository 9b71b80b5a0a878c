from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..attendance.service import AttendanceLedger
from ..core.exceptions import NotFoundError, ValidationError
from ..members.repository import MemberRepository
from ..sessions.repository import SessionRepository


@dataclass(frozen=True)
class AttendanceReport:
    total_sessions: int
    total_members: int
    rows: list[dict]


@dataclass(frozen=True)
class MemberStats:
    member_id: int
    registration_code: str
    full_name: str
    year: Optional[str]
    total_attendance: int
    current_streak: int
    longest_streak: int
    last_attendance_date: Optional[datetime]


class AttendanceReportService:
    """Simple per-member aggregation over sessions in a date range."""

    def __init__(self, sessions: SessionRepository, members: MemberRepository, ledger: AttendanceLedger):
        self._sessions = sessions
        self._members = members
        self._ledger = ledger

    def attendance_report(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        year: Optional[str] = None,
    ) -> AttendanceReport:
        if start_date and end_date and start_date > end_date:
            raise ValidationError("Start date must not be after end date")

        sessions = self._sessions.list_sessions(start_date=start_date, end_date=end_date)
        session_ids = [s.session_id for s in sessions]
        total = len(session_ids)
        members = self._members.list_active(year=year)

        rows: list[dict] = []
        for m in members:
            attended = self._ledger.count_present(m.member_id, session_ids)
            percentage = round(attended / total * 100, 2) if total else 0.0
            rows.append(
                {
                    "member_id": m.member_id,
                    "registration_code": m.registration_code,
                    "full_name": m.full_name,
                    "year": m.year,
                    "email": m.email,
                    "total_sessions": total,
                    "attended_sessions": attended,
                    "percentage": percentage,
                    "current_streak": m.current_streak,
                    "longest_streak": m.longest_streak,
                }
            )

        rows.sort(key=lambda r: r["registration_code"])
        return AttendanceReport(total_sessions=total, total_members=len(rows), rows=rows)

    def member_stats(self, member_id: int) -> MemberStats:
        member = self._members.get_by_id(int(member_id))
        if not member:
            raise NotFoundError("Member not found")
        return MemberStats(
            member_id=member.member_id,
            registration_code=member.registration_code,
            full_name=member.full_name,
            year=member.year,
            total_attendance=self._ledger.count_present_total(member.member_id),
            current_streak=member.current_streak,
            longest_streak=member.longest_streak,
            last_attendance_date=member.last_attendance_date,
        )
