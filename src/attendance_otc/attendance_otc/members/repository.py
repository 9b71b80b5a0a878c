from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Member


class MemberRepository(Protocol):
    """Directory lookups needed by the attendance core.

    Note (DIP): services depend on this interface, not on a concrete DB.
    """

    def get_by_id(self, member_id: int) -> Optional[Member]:
        raise NotImplementedError

    def find_active_by_registration_code(self, registration_code: str) -> Optional[Member]:
        """Registration code is expected upper-cased already."""

        raise NotImplementedError

    def list_active(self, *, year: Optional[str] = None) -> Sequence[Member]:
        raise NotImplementedError

    def save_streak(self, member: Member) -> None:
        """Persist current/longest streak and last attendance date only."""

        raise NotImplementedError
