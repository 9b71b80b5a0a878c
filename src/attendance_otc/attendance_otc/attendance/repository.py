from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceOrigin, AttendanceStatus
from .model import AttendanceRecord, SessionRosterRow


class AttendanceRepository(Protocol):
    def create(
        self,
        *,
        member_id: int,
        session_id: int,
        status: AttendanceStatus,
        marked_at: datetime,
        origin: AttendanceOrigin,
        marked_by: Optional[int] = None,
        ip_address: Optional[str] = None,
    ) -> AttendanceRecord:
        """Insert a record.

        Uniqueness of (member_id, session_id) is enforced by the store itself:
        a second insert for the pair raises DuplicateAttendanceError.
        """

        raise NotImplementedError

    def get_for_member_and_session(self, member_id: int, session_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_session(self, session_id: int) -> Sequence[AttendanceRecord]:
        """Ascending by marked_at."""

        raise NotImplementedError

    def roster_for_session(self, session_id: int) -> Sequence[SessionRosterRow]:
        raise NotImplementedError

    def count_present(self, member_id: int, session_ids: Sequence[int]) -> int:
        raise NotImplementedError

    def count_present_total(self, member_id: int) -> int:
        raise NotImplementedError
