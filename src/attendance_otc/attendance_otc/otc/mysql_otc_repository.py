from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from ..core.exceptions import DuplicateRequestError, NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import OneTimeCode
from .repository import OneTimeCodeRepository

_COLUMNS = """
    code_id, member_id, session_id, code, expires_at, created_at,
    is_used, is_verified, attempts, max_attempts
"""


def _to_code(r: Dict[str, Any]) -> OneTimeCode:
    return OneTimeCode(
        code_id=int(r["code_id"]),
        member_id=int(r["member_id"]),
        session_id=int(r["session_id"]),
        code=r["code"],
        expires_at=r["expires_at"],
        created_at=r["created_at"],
        is_used=bool(r["is_used"]),
        is_verified=bool(r["is_verified"]),
        attempts=int(r["attempts"]),
        max_attempts=int(r["max_attempts"]),
    )


class MySQLOneTimeCodeRepository(OneTimeCodeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        with db_cursor(self._conn_factory) as (_, cur):
            # Member row lock serializes concurrent issuance for the same member.
            cur.execute("SELECT member_id FROM members WHERE member_id=%s FOR UPDATE", (int(member_id),))
            if not fetchone(cur):
                raise NotFoundError("Member not found")

            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM one_time_codes
                WHERE member_id=%s AND session_id=%s AND is_used=0 AND expires_at >= %s
                ORDER BY created_at DESC, code_id DESC
                LIMIT 1
                """,
                (int(member_id), int(session_id), now),
            )
            existing = fetchone(cur)
            if existing:
                raise DuplicateRequestError(
                    "Code already sent. Please check your email or wait for it to expire.",
                    expires_at=existing["expires_at"],
                )

            cur.execute(
                """
                INSERT INTO one_time_codes(member_id, session_id, code, expires_at, created_at, max_attempts)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (int(member_id), int(session_id), code, expires_at, now, int(max_attempts)),
            )
            code_id = int(cur.lastrowid)

        return OneTimeCode(
            code_id=code_id,
            member_id=int(member_id),
            session_id=int(session_id),
            code=code,
            expires_at=expires_at,
            created_at=now,
            max_attempts=int(max_attempts),
        )

    def get_by_id(self, code_id: int) -> Optional[OneTimeCode]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM one_time_codes WHERE code_id=%s", (int(code_id),))
            r = fetchone(cur)
            return _to_code(r) if r else None

    def get_latest_unused(self, member_id: int, session_id: int) -> Optional[OneTimeCode]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM one_time_codes
                WHERE member_id=%s AND session_id=%s AND is_used=0
                ORDER BY created_at DESC, code_id DESC
                LIMIT 1
                """,
                (int(member_id), int(session_id)),
            )
            r = fetchone(cur)
            return _to_code(r) if r else None

    def increment_attempts(self, code_id: int) -> Optional[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE one_time_codes
                SET attempts = attempts + 1
                WHERE code_id=%s AND is_used=0 AND attempts < max_attempts
                """,
                (int(code_id),),
            )
            if cur.rowcount == 0:
                return None
            cur.execute("SELECT attempts FROM one_time_codes WHERE code_id=%s", (int(code_id),))
            r = fetchone(cur)
            return int(r["attempts"]) if r else None

    def mark_used(self, code_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE one_time_codes
                SET is_used=1, is_verified=1
                WHERE code_id=%s AND is_used=0 AND attempts < max_attempts
                """,
                (int(code_id),),
            )
            return cur.rowcount > 0
