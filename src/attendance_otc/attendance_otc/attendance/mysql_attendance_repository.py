from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from ..core.enums import AttendanceOrigin, AttendanceStatus
from ..core.exceptions import DuplicateAttendanceError, DuplicateKeyError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import AttendanceRecord, SessionRosterRow
from .repository import AttendanceRepository

_COLUMNS = "attendance_id, member_id, session_id, status, marked_at, origin, marked_by, ip_address"


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        member_id=int(r["member_id"]),
        session_id=int(r["session_id"]),
        status=AttendanceStatus(r["status"]),
        marked_at=r["marked_at"],
        origin=AttendanceOrigin(r["origin"]),
        marked_by=r.get("marked_by"),
        ip_address=r.get("ip_address"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        member_id: int,
        session_id: int,
        status: AttendanceStatus,
        marked_at: datetime,
        origin: AttendanceOrigin,
        marked_by: Optional[int] = None,
        ip_address: Optional[str] = None,
    ) -> AttendanceRecord:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(member_id, session_id, status, marked_at, origin, marked_by, ip_address)
                    VALUES(%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (int(member_id), int(session_id), status.value, marked_at, origin.value, marked_by, ip_address),
                )
                attendance_id = int(cur.lastrowid)
        except DuplicateKeyError as exc:
            raise DuplicateAttendanceError("Attendance already marked for this session") from exc

        return AttendanceRecord(
            attendance_id=attendance_id,
            member_id=int(member_id),
            session_id=int(session_id),
            status=status,
            marked_at=marked_at,
            origin=origin,
            marked_by=marked_by,
            ip_address=ip_address,
        )

    def get_for_member_and_session(self, member_id: int, session_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE member_id=%s AND session_id=%s",
                (int(member_id), int(session_id)),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_for_session(self, session_id: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE session_id=%s
                ORDER BY marked_at ASC, attendance_id ASC
                """,
                (int(session_id),),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def roster_for_session(self, session_id: int) -> Sequence[SessionRosterRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT
                    ar.attendance_id, ar.member_id, ar.status, ar.marked_at, ar.origin, ar.marked_by,
                    m.registration_code, m.full_name, m.email, m.year, m.gender
                FROM attendance_records ar
                JOIN members m ON m.member_id = ar.member_id
                WHERE ar.session_id=%s
                ORDER BY ar.marked_at ASC, ar.attendance_id ASC
                """,
                (int(session_id),),
            )
            return [
                SessionRosterRow(
                    attendance_id=int(r["attendance_id"]),
                    member_id=int(r["member_id"]),
                    registration_code=r["registration_code"],
                    full_name=r["full_name"],
                    email=r["email"],
                    year=r.get("year"),
                    gender=r.get("gender"),
                    status=AttendanceStatus(r["status"]),
                    marked_at=r["marked_at"],
                    origin=AttendanceOrigin(r["origin"]),
                    marked_by=r.get("marked_by"),
                )
                for r in fetchall(cur)
            ]

    def count_present(self, member_id: int, session_ids: Sequence[int]) -> int:
        ids = [int(s) for s in session_ids]
        if not ids:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT COUNT(*) AS cnt
                FROM attendance_records
                WHERE member_id=%s AND status=%s AND session_id IN ({in_clause(ids)})
                """,
                (int(member_id), AttendanceStatus.PRESENT.value, *ids),
            )
            row = fetchone(cur)
            return int(row["cnt"]) if row else 0

    def count_present_total(self, member_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS cnt FROM attendance_records WHERE member_id=%s AND status=%s",
                (int(member_id), AttendanceStatus.PRESENT.value),
            )
            row = fetchone(cur)
            return int(row["cnt"]) if row else 0
