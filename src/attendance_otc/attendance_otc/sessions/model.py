from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class Session:
    """Domain entity: a bounded window during which attendance is recorded.

    At most one session is active at a time; a closed session is never
    reopened.
    """

    session_id: int
    label: str
    session_date: date
    start_time: datetime
    end_time: Optional[datetime]
    is_active: bool
    opened_by: int
    closed_by: Optional[int] = None
