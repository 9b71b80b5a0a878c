from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Member
from .repository import MemberRepository

_COLUMNS = """
    member_id, registration_code, full_name, email, gender, year, is_active,
    current_streak, longest_streak, last_attendance_date
"""


def _to_member(row: Dict[str, Any]) -> Member:
    return Member(
        member_id=int(row["member_id"]),
        registration_code=row["registration_code"],
        full_name=row["full_name"],
        email=row["email"],
        gender=row.get("gender"),
        year=row.get("year"),
        is_active=bool(row.get("is_active", True)),
        current_streak=int(row.get("current_streak") or 0),
        longest_streak=int(row.get("longest_streak") or 0),
        last_attendance_date=row.get("last_attendance_date"),
    )


class MySQLMemberRepository(MemberRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, member_id: int) -> Optional[Member]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM members WHERE member_id=%s", (int(member_id),))
            row = fetchone(cur)
            return _to_member(row) if row else None

    def find_active_by_registration_code(self, registration_code: str) -> Optional[Member]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM members WHERE registration_code=%s AND is_active=1",
                (registration_code.upper(),),
            )
            row = fetchone(cur)
            return _to_member(row) if row else None

    def list_active(self, *, year: Optional[str] = None) -> Sequence[Member]:
        sql = f"SELECT {_COLUMNS} FROM members WHERE is_active=1"
        params: list[object] = []
        if year:
            sql += " AND year=%s"
            params.append(str(year))
        sql += " ORDER BY registration_code ASC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_member(r) for r in fetchall(cur)]

    def save_streak(self, member: Member) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE members
                SET current_streak=%s, longest_streak=%s, last_attendance_date=%s
                WHERE member_id=%s
                """,
                (
                    member.current_streak,
                    member.longest_streak,
                    member.last_attendance_date,
                    member.member_id,
                ),
            )
