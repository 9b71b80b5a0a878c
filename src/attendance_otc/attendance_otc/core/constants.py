"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_CODE_LENGTH = 6
DEFAULT_CODE_EXPIRY_MINUTES = 3
DEFAULT_MAX_ATTEMPTS = 3

DEFAULT_RATE_LIMIT = 5
DEFAULT_RATE_WINDOW_SECONDS = 15 * 60

DEFAULT_TIMEZONE = "UTC"


@dataclass(frozen=True)
class OtcSettings:
    code_length: int = DEFAULT_CODE_LENGTH
    expiry_minutes: int = DEFAULT_CODE_EXPIRY_MINUTES
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
