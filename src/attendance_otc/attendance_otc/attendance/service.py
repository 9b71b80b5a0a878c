from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.enums import AttendanceOrigin, AttendanceStatus
from .model import AttendanceRecord, SessionRosterRow
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceLedger:
    """Use case: write and read attendance records.

    Duplicate protection is the repository's unique (member, session) key;
    `has_record` is only an early, friendlier rejection.
    """

    def __init__(self, attendance: AttendanceRepository, *, clock: Callable[[], datetime] = now_local):
        self._attendance = attendance
        self._clock = clock

    def record(
        self,
        member_id: int,
        session_id: int,
        status: AttendanceStatus,
        origin: AttendanceOrigin,
        marked_by: Optional[int] = None,
        *,
        marked_at: Optional[datetime] = None,
        ip_address: Optional[str] = None,
    ) -> AttendanceRecord:
        record = self._attendance.create(
            member_id=int(member_id),
            session_id=int(session_id),
            status=status,
            marked_at=marked_at or self._clock(),
            origin=origin,
            marked_by=marked_by,
            ip_address=ip_address,
        )
        logger.info(
            "Attendance %s recorded: member=%s session=%s status=%s origin=%s",
            record.attendance_id,
            member_id,
            session_id,
            status.value,
            origin.value,
        )
        return record

    def has_record(self, member_id: int, session_id: int) -> bool:
        return self._attendance.get_for_member_and_session(int(member_id), int(session_id)) is not None

    def list_for_session(self, session_id: int) -> Sequence[AttendanceRecord]:
        return self._attendance.list_for_session(int(session_id))

    def roster(self, session_id: int) -> Sequence[SessionRosterRow]:
        return self._attendance.roster_for_session(int(session_id))

    def count_present(self, member_id: int, session_ids: Sequence[int]) -> int:
        if not session_ids:
            return 0
        return self._attendance.count_present(int(member_id), list(session_ids))

    def count_present_total(self, member_id: int) -> int:
        return self._attendance.count_present_total(int(member_id))
