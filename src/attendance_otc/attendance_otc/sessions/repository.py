from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import Session


class SessionRepository(Protocol):
    def create_active(self, *, label: str, session_date: date, start_time: datetime, opened_by: int) -> Session:
        """Insert an active session.

        Must be an atomic conditional write: raises ConflictError when another
        session is active, even under concurrent callers.
        """

        raise NotImplementedError

    def close_if_active(self, *, session_id: int, end_time: datetime, closed_by: int) -> bool:
        """Close the session only if it is still active; False otherwise."""

        raise NotImplementedError

    def get_by_id(self, session_id: int) -> Optional[Session]:
        raise NotImplementedError

    def get_active(self) -> Optional[Session]:
        raise NotImplementedError

    def list_sessions(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        is_active: Optional[bool] = None,
    ) -> Sequence[Session]:
        raise NotImplementedError
