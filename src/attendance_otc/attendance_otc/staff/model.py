from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Role


@dataclass(frozen=True)
class Staff:
    """Domain entity: a staff account that opens sessions and marks attendance.

    Note: Plain data object (no DB access code here).
    """

    staff_id: int
    full_name: str
    username: str
    password_hash: str
    role: Role
    is_active: bool = True
