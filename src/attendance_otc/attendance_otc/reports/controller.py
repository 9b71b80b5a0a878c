from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_optional_date
from ..common.http import login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/report", methods=["GET"], endpoint="api_attendance_report")
    @login_required
    def attendance_report():
        report = container.report_service.attendance_report(
            start_date=parse_optional_date(request.args.get("startDate")),
            end_date=parse_optional_date(request.args.get("endDate")),
            year=(request.args.get("year") or "").strip() or None,
        )
        return ok(report)

    @app.route("/api/members/<int:member_id>/stats", methods=["GET"], endpoint="api_member_stats")
    @login_required
    def member_stats(member_id: int):
        return ok(container.report_service.member_stats(member_id))
