from __future__ import annotations

import logging
import secrets
from datetime import datetime
from typing import Callable, Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_local
from ..core.constants import OtcSettings
from ..core.exceptions import (
    AttemptsExceededError,
    DuplicateAttendanceError,
    ExpiredError,
    MismatchError,
    NoActiveSessionError,
    NotRequestedError,
)
from ..sessions.repository import SessionRepository
from .generator import CodeGenerator
from .model import OneTimeCode
from .repository import OneTimeCodeRepository

logger = logging.getLogger(__name__)


class OneTimeCodeService:
    """Use case: issue and verify one-time codes.

    A verified code is consumed for good, even if the attendance write that
    follows fails.
    """

    def __init__(
        self,
        codes: OneTimeCodeRepository,
        sessions: SessionRepository,
        attendance: AttendanceRepository,
        *,
        generator: Optional[CodeGenerator] = None,
        settings: Optional[OtcSettings] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._codes = codes
        self._sessions = sessions
        self._attendance = attendance
        self._settings = settings or OtcSettings()
        self._generator = generator or CodeGenerator(
            length=self._settings.code_length,
            expiry_minutes=self._settings.expiry_minutes,
        )
        self._clock = clock

    @property
    def expiry_minutes(self) -> int:
        return self._settings.expiry_minutes

    def issue(self, member_id: int, session_id: int, *, now: Optional[datetime] = None) -> OneTimeCode:
        now = now or self._clock()

        session = self._sessions.get_by_id(int(session_id))
        if not session or not session.is_active:
            raise NoActiveSessionError("No active attendance session")

        if self._attendance.get_for_member_and_session(int(member_id), int(session_id)):
            raise DuplicateAttendanceError("Attendance already marked for this session")

        issued = self._codes.create_if_none_outstanding(
            member_id=int(member_id),
            session_id=int(session_id),
            code=self._generator.generate(self._settings.code_length),
            expires_at=self._generator.expiry_of(now, self._settings.expiry_minutes),
            max_attempts=self._settings.max_attempts,
            now=now,
        )
        logger.info(
            "Code %s issued: member=%s session=%s expires_at=%s",
            issued.code_id,
            member_id,
            session_id,
            issued.expires_at.isoformat(),
        )
        return issued

    def verify(
        self,
        member_id: int,
        session_id: int,
        submitted_code: str,
        *,
        now: Optional[datetime] = None,
    ) -> OneTimeCode:
        now = now or self._clock()

        current = self._codes.get_latest_unused(int(member_id), int(session_id))
        if not current:
            raise NotRequestedError("No code request found. Please request a code first.")

        if current.is_expired(now):
            logger.warning("Expired code %s submitted by member %s", current.code_id, member_id)
            raise ExpiredError("Code has expired. Please request a new one.")

        if current.attempts >= current.max_attempts:
            raise AttemptsExceededError("Maximum verification attempts exceeded. Please request a new code.")

        submitted = (submitted_code or "").strip()
        if not secrets.compare_digest(submitted.encode(), current.code.encode()):
            attempts = self._codes.increment_attempts(current.code_id)
            if attempts is None:
                raise self._classify_lost_race(current.code_id)
            remaining = max(current.max_attempts - attempts, 0)
            logger.warning(
                "Code mismatch for member %s (attempt %s/%s)", member_id, attempts, current.max_attempts
            )
            raise MismatchError(
                f"Invalid code. {remaining} attempts remaining.",
                remaining_attempts=remaining,
            )

        if not self._codes.mark_used(current.code_id):
            raise self._classify_lost_race(current.code_id)

        logger.info("Code %s verified for member %s", current.code_id, member_id)
        return self._codes.get_by_id(current.code_id) or current

    def _classify_lost_race(self, code_id: int) -> Exception:
        # A concurrent request changed the code between read and guarded write.
        latest = self._codes.get_by_id(code_id)
        if latest and not latest.is_used and latest.attempts >= latest.max_attempts:
            return AttemptsExceededError("Maximum verification attempts exceeded. Please request a new code.")
        return NotRequestedError("No code request found. Please request a code first.")
