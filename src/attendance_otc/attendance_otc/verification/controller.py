from __future__ import annotations

from flask import Flask, request

from ..common.http import current_staff_id, ok, staff_required
from ..common.validators import normalize_registration_code, parse_status
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def client_address() -> str:
        return request.remote_addr or "unknown"

    @app.route("/api/attendance/request-code", methods=["POST"], endpoint="api_request_code")
    def request_code():
        payload = request.get_json(silent=True) or {}
        registration_code = normalize_registration_code(str(payload.get("registrationCode", "")))
        container.rate_limiter.hit(f"{client_address()}|{registration_code}")

        result = container.verification_service.request_code(registration_code)
        return ok(
            {"expiresIn": result.expires_in_minutes, "expiresAt": result.expires_at},
            "Code sent to your registered email",
        )

    @app.route("/api/attendance/verify-code", methods=["POST"], endpoint="api_verify_code")
    def verify_code():
        payload = request.get_json(silent=True) or {}
        result = container.verification_service.verify_code(
            str(payload.get("registrationCode", "")),
            str(payload.get("code", "")),
            ip_address=client_address(),
        )
        return ok(
            {
                "memberName": result.member_name,
                "registrationCode": result.registration_code,
                "currentStreak": result.current_streak,
                "markedAt": result.marked_at,
            },
            "Attendance marked successfully",
        )

    @app.route("/api/attendance/direct-mark", methods=["POST"], endpoint="api_direct_mark")
    @staff_required
    def direct_mark():
        payload = request.get_json(silent=True) or {}
        result = container.verification_service.mark_direct(
            str(payload.get("registrationCode", "")),
            parse_status(payload.get("status")),
            current_staff_id(),
            ip_address=client_address(),
        )
        return ok(
            {
                "memberName": result.member_name,
                "registrationCode": result.registration_code,
                "status": result.status,
                "markedAt": result.marked_at,
            },
            f"Attendance marked as {result.status.value}",
        )
