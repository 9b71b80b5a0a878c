from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..core.constants import DEFAULT_MAX_ATTEMPTS


@dataclass(frozen=True)
class OneTimeCode:
    """Domain entity: a short-lived single-use code bound to a member and a session.

    Terminal once used or expired. Several may exist for a (member, session)
    pair over time, but at most one is outstanding.
    """

    code_id: int
    member_id: int
    session_id: int
    code: str
    expires_at: datetime
    created_at: datetime
    is_used: bool = False
    is_verified: bool = False
    attempts: int = 0
    max_attempts: int = DEFAULT_MAX_ATTEMPTS

    @property
    def remaining_attempts(self) -> int:
        return max(self.max_attempts - self.attempts, 0)

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def is_outstanding(self, now: datetime) -> bool:
        return not self.is_used and not self.is_expired(now)
