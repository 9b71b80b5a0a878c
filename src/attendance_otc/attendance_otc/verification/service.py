from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from ..attendance.model import AttendanceRecord
from ..attendance.service import AttendanceLedger
from ..attendance.streaks import update_on_attendance
from ..common.datetime_utils import now_local
from ..common.validators import normalize_registration_code, require_non_empty
from ..core.enums import AttendanceOrigin, AttendanceStatus
from ..core.exceptions import DuplicateAttendanceError, NotFoundError
from ..delivery.base import CodeDelivery
from ..members.model import Member
from ..members.repository import MemberRepository
from ..otc.service import OneTimeCodeService
from ..sessions.service import SessionRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CodeRequestResult:
    expires_in_minutes: int
    expires_at: datetime


@dataclass(frozen=True)
class VerificationResult:
    member_name: str
    registration_code: str
    current_streak: int
    marked_at: datetime


@dataclass(frozen=True)
class DirectMarkResult:
    member_name: str
    registration_code: str
    status: AttendanceStatus
    marked_at: datetime


class VerificationService:
    """Facade for the check-in flows: request code, verify code, direct mark.

    Holds no locks; atomicity is delegated to the stores behind the registry,
    the code service and the ledger.
    """

    def __init__(
        self,
        members: MemberRepository,
        sessions: SessionRegistry,
        codes: OneTimeCodeService,
        ledger: AttendanceLedger,
        delivery: CodeDelivery,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._members = members
        self._sessions = sessions
        self._codes = codes
        self._ledger = ledger
        self._delivery = delivery
        self._clock = clock

    def _resolve_member(self, registration_code: str) -> Member:
        code = normalize_registration_code(registration_code)
        member = self._members.find_active_by_registration_code(code)
        if not member:
            raise NotFoundError("Member not found")
        return member

    def _reject_duplicate(self, member: Member, session_id: int) -> None:
        if self._ledger.has_record(member.member_id, session_id):
            raise DuplicateAttendanceError("Attendance already marked for this session")

    def _apply_streak(self, member: Member, record: AttendanceRecord) -> Member:
        updated = update_on_attendance(member, record.marked_at)
        self._members.save_streak(updated)
        return updated

    def request_code(self, registration_code: str, *, now: Optional[datetime] = None) -> CodeRequestResult:
        now = now or self._clock()
        member = self._resolve_member(registration_code)
        session = self._sessions.require_active_session()
        self._reject_duplicate(member, session.session_id)

        issued = self._codes.issue(member.member_id, session.session_id, now=now)

        # Code stays persisted if this raises; redelivery happens outside the core.
        self._delivery.deliver(member.email, issued.code, member.full_name, self._codes.expiry_minutes)

        return CodeRequestResult(expires_in_minutes=self._codes.expiry_minutes, expires_at=issued.expires_at)

    def verify_code(
        self,
        registration_code: str,
        submitted_code: str,
        *,
        now: Optional[datetime] = None,
        ip_address: Optional[str] = None,
    ) -> VerificationResult:
        now = now or self._clock()
        submitted_code = require_non_empty(submitted_code, "Code")
        member = self._resolve_member(registration_code)
        session = self._sessions.require_active_session()

        self._codes.verify(member.member_id, session.session_id, submitted_code, now=now)

        # A concurrent direct mark may have landed after the code was issued.
        self._reject_duplicate(member, session.session_id)
        record = self._ledger.record(
            member.member_id,
            session.session_id,
            AttendanceStatus.PRESENT,
            AttendanceOrigin.SELF,
            marked_at=now,
            ip_address=ip_address,
        )
        updated = self._apply_streak(member, record)

        return VerificationResult(
            member_name=updated.full_name,
            registration_code=updated.registration_code,
            current_streak=updated.current_streak,
            marked_at=record.marked_at,
        )

    def mark_direct(
        self,
        registration_code: str,
        status: AttendanceStatus,
        staff_id: int,
        *,
        now: Optional[datetime] = None,
        ip_address: Optional[str] = None,
    ) -> DirectMarkResult:
        now = now or self._clock()
        member = self._resolve_member(registration_code)
        session = self._sessions.require_active_session()
        self._reject_duplicate(member, session.session_id)

        record = self._ledger.record(
            member.member_id,
            session.session_id,
            status,
            AttendanceOrigin.STAFF,
            int(staff_id),
            marked_at=now,
            ip_address=ip_address,
        )
        if status == AttendanceStatus.PRESENT:
            self._apply_streak(member, record)

        return DirectMarkResult(
            member_name=member.full_name,
            registration_code=member.registration_code,
            status=record.status,
            marked_at=record.marked_at,
        )
