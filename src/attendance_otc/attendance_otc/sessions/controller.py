from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_optional_date
from ..common.http import current_staff_id, fail, login_required, ok, staff_required
from ..container import Container


def _parse_bool(value):
    v = (value or "").strip().lower()
    if not v:
        return None
    return v in ("1", "true", "yes")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/sessions", methods=["GET"], endpoint="api_list_sessions")
    @login_required
    def list_sessions():
        sessions = container.session_registry.list_sessions(
            start_date=parse_optional_date(request.args.get("startDate")),
            end_date=parse_optional_date(request.args.get("endDate")),
            is_active=_parse_bool(request.args.get("isActive")),
        )
        return ok(list(sessions))

    @app.route("/api/attendance/sessions/active", methods=["GET"], endpoint="api_active_session")
    def active_session():
        session = container.session_registry.get_active_session()
        if not session:
            return fail("No active attendance session", 404)
        return ok(session)

    @app.route("/api/attendance/sessions", methods=["POST"], endpoint="api_open_session")
    @staff_required
    def open_session():
        payload = request.get_json(silent=True) or {}
        session = container.session_registry.open_session(
            str(payload.get("label", "")),
            parse_optional_date(payload.get("date")),
            current_staff_id(),
        )
        return ok(session, "Attendance session opened", 201)

    @app.route("/api/attendance/sessions/<int:session_id>/close", methods=["PUT"], endpoint="api_close_session")
    @staff_required
    def close_session(session_id: int):
        session = container.session_registry.close_session(session_id, current_staff_id())
        return ok(session, "Attendance session closed")

    @app.route("/api/attendance/sessions/<int:session_id>/records", methods=["GET"], endpoint="api_session_records")
    @login_required
    def session_records(session_id: int):
        session = container.session_registry.get_session(session_id)
        roster = container.attendance_ledger.roster(session_id)
        return ok({"session": session, "count": len(roster), "records": list(roster)})
