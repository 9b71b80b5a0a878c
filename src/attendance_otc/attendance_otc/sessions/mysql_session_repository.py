from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

from ..core.exceptions import ConflictError, DuplicateKeyError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Session
from .repository import SessionRepository

_COLUMNS = "session_id, label, session_date, start_time, end_time, is_active, opened_by, closed_by"


def _to_session(row: Dict[str, Any]) -> Session:
    return Session(
        session_id=int(row["session_id"]),
        label=row["label"],
        session_date=row["session_date"],
        start_time=row["start_time"],
        end_time=row.get("end_time"),
        is_active=bool(row["is_active"]),
        opened_by=int(row["opened_by"]),
        closed_by=row.get("closed_by"),
    )


class MySQLSessionRepository(SessionRepository):
    """Sessions table; `active_slot` carries a unique index over active rows."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_active(self, *, label: str, session_date: date, start_time: datetime, opened_by: int) -> Session:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO sessions(label, session_date, start_time, is_active, opened_by)
                    VALUES(%s,%s,%s,1,%s)
                    """,
                    (label, session_date, start_time, int(opened_by)),
                )
                session_id = int(cur.lastrowid)
        except DuplicateKeyError as exc:
            raise ConflictError("An attendance session is already active. Please close it first.") from exc

        return Session(
            session_id=session_id,
            label=label,
            session_date=session_date,
            start_time=start_time,
            end_time=None,
            is_active=True,
            opened_by=int(opened_by),
        )

    def close_if_active(self, *, session_id: int, end_time: datetime, closed_by: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE sessions
                SET is_active=0, end_time=%s, closed_by=%s
                WHERE session_id=%s AND is_active=1
                """,
                (end_time, int(closed_by), int(session_id)),
            )
            return cur.rowcount > 0

    def get_by_id(self, session_id: int) -> Optional[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM sessions WHERE session_id=%s", (int(session_id),))
            row = fetchone(cur)
            return _to_session(row) if row else None

    def get_active(self) -> Optional[Session]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM sessions WHERE is_active=1")
            row = fetchone(cur)
            return _to_session(row) if row else None

    def list_sessions(
        self,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        is_active: Optional[bool] = None,
    ) -> Sequence[Session]:
        clauses: list[str] = []
        params: list[object] = []

        if start_date is not None:
            clauses.append("session_date >= %s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("session_date <= %s")
            params.append(end_date)
        if is_active is not None:
            clauses.append("is_active=%s")
            params.append(1 if is_active else 0)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM sessions
                {where}
                ORDER BY start_time DESC, session_id DESC
                """,
                tuple(params),
            )
            return [_to_session(r) for r in fetchall(cur)]
