from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty
from ..core.exceptions import InvalidStateError, NoActiveSessionError, NotFoundError, ValidationError
from .model import Session
from .repository import SessionRepository

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Use case: open/close attendance sessions.

    The "one active session" rule lives in the repository as an atomic
    conditional write, never as a read-then-write here.
    """

    def __init__(self, sessions: SessionRepository, *, clock: Callable[[], datetime] = now_local):
        self._sessions = sessions
        self._clock = clock

    def open_session(self, label: str, session_date: Optional[date], opener_id: int) -> Session:
        label = require_non_empty(label, "Session label")
        now = self._clock()

        session = self._sessions.create_active(
            label=label,
            session_date=session_date or now.date(),
            start_time=now,
            opened_by=int(opener_id),
        )
        logger.info("Session %s (%r) opened by staff %s", session.session_id, label, opener_id)
        return session

    def close_session(self, session_id: int, closer_id: int) -> Session:
        now = self._clock()
        if not self._sessions.close_if_active(session_id=int(session_id), end_time=now, closed_by=int(closer_id)):
            existing = self._sessions.get_by_id(int(session_id))
            if not existing:
                raise NotFoundError("Session not found")
            raise InvalidStateError("Session is already closed")

        logger.info("Session %s closed by staff %s", session_id, closer_id)
        return self.get_session(session_id)

    def get_active_session(self) -> Optional[Session]:
        return self._sessions.get_active()

    def require_active_session(self) -> Session:
        session = self._sessions.get_active()
        if not session:
            raise NoActiveSessionError("No active attendance session")
        return session

    def get_session(self, session_id: int) -> Session:
        session = self._sessions.get_by_id(int(session_id))
        if not session:
            raise NotFoundError("Session not found")
        return session

    def list_sessions(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        is_active: Optional[bool] = None,
    ) -> Sequence[Session]:
        if start_date and end_date and start_date > end_date:
            raise ValidationError("Start date must not be after end date")
        return self._sessions.list_sessions(start_date=start_date, end_date=end_date, is_active=is_active)
