from __future__ import annotations

import logging
from dataclasses import dataclass

from werkzeug.security import check_password_hash

from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, NotFoundError
from .repository import StaffRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionStaff:
    """What we store into the Flask session after login."""

    staff_id: int
    full_name: str
    username: str
    role: Role


class AuthService:
    """Use case: authenticate staff (login)."""

    def __init__(self, staff: StaffRepository):
        self._staff = staff

    def authenticate(self, username: str, password: str) -> SessionStaff:
        username = require_non_empty(username, "Username")
        account = self._staff.get_by_username(username)
        if not account or not account.is_active:
            logger.warning("Login rejected for unknown or inactive account %r", username)
            raise AuthenticationError("Invalid username or password")

        try:
            ok = check_password_hash(account.password_hash, password or "")
        except ValueError:
            # e.g. placeholder hashes like 'CHANGE_ME'
            ok = False

        if not ok:
            logger.warning("Login rejected for %r: bad password", username)
            raise AuthenticationError("Invalid username or password")

        return SessionStaff(
            staff_id=account.staff_id,
            full_name=account.full_name,
            username=account.username,
            role=account.role,
        )

    def get_profile(self, staff_id: int) -> SessionStaff:
        account = self._staff.get_by_id(staff_id)
        if not account or not account.is_active:
            raise NotFoundError("Staff account not found")
        return SessionStaff(
            staff_id=account.staff_id,
            full_name=account.full_name,
            username=account.username,
            role=account.role,
        )
