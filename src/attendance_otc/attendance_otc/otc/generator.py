from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from ..core.constants import DEFAULT_CODE_EXPIRY_MINUTES, DEFAULT_CODE_LENGTH


@dataclass(frozen=True)
class CodeGenerator:
    """Numeric one-time codes and their expiry. Stateless.

    Kept apart from the store so tests can substitute a deterministic one.
    """

    length: int = DEFAULT_CODE_LENGTH
    expiry_minutes: int = DEFAULT_CODE_EXPIRY_MINUTES

    def generate(self, length: Optional[int] = None) -> str:
        n = int(length or self.length)
        if n <= 0:
            raise ValueError("Code length must be positive")
        return "".join(secrets.choice("0123456789") for _ in range(n))

    def expiry_of(self, now: datetime, minutes: Optional[int] = None) -> datetime:
        return now + timedelta(minutes=self.expiry_minutes if minutes is None else int(minutes))
