from __future__ import annotations

from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

from ..core.constants import DEFAULT_TIMEZONE
from ..core.exceptions import ValidationError

_timezone = ZoneInfo(DEFAULT_TIMEZONE)


def configure_timezone(name: str) -> None:
    """Set the timezone used for 'now' and calendar-day truncation."""
    global _timezone
    _timezone = ZoneInfo(name)


def now_local() -> datetime:
    """Current wall-clock time in the configured timezone, naive.

    Note: Wrapped so tests can patch/mocked easier. Stored timestamps are naive
    local times (MySQL DATETIME has no zone).
    """
    return datetime.now(_timezone).replace(tzinfo=None)


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid date {value!r}, expected YYYY-MM-DD")


def parse_optional_date(value) -> Optional[date]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"Invalid date {value!r}, expected YYYY-MM-DD")
    v = value.strip()
    return parse_iso_date(v) if v else None
