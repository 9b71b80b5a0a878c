from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from .model import OneTimeCode


class OneTimeCodeRepository(Protocol):
    def create_if_none_outstanding(
        self,
        *,
        member_id: int,
        session_id: int,
        code: str,
        expires_at: datetime,
        max_attempts: int,
        now: datetime,
    ) -> OneTimeCode:
        """Insert a code unless an unused, unexpired one exists for the pair.

        Check and insert are one atomic step; raises DuplicateRequestError.
        """

        raise NotImplementedError

    def get_by_id(self, code_id: int) -> Optional[OneTimeCode]:
        raise NotImplementedError

    def get_latest_unused(self, member_id: int, session_id: int) -> Optional[OneTimeCode]:
        raise NotImplementedError

    def increment_attempts(self, code_id: int) -> Optional[int]:
        """Atomically bump `attempts` on an unused code still under its limit.

        Returns the new count, or None when the guard rejected the update.
        """

        raise NotImplementedError

    def mark_used(self, code_id: int) -> bool:
        """Atomically consume an unused code still under its limit."""

        raise NotImplementedError
