from __future__ import annotations

import logging
from datetime import timedelta

from flask import Flask, request, session

from ..common.http import current_staff_id, login_required, ok
from ..container import Container

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="api_login")
    def login():
        payload = request.get_json(silent=True) or {}
        s_staff = container.auth_service.authenticate(
            str(payload.get("username", "")),
            str(payload.get("password", "")),
        )

        session.clear()
        session.permanent = bool(payload.get("rememberMe"))
        app.permanent_session_lifetime = timedelta(days=7)

        session["staff_id"] = s_staff.staff_id
        session["name"] = s_staff.full_name
        session["role"] = s_staff.role.value

        logger.info("Staff %s logged in", s_staff.username)
        return ok(s_staff, "Login successful")

    @app.route("/api/auth/logout", methods=["POST"], endpoint="api_logout")
    def logout():
        session.clear()
        return ok(message="Logged out")

    @app.route("/api/auth/me", methods=["GET"], endpoint="api_me")
    @login_required
    def me():
        return ok(container.auth_service.get_profile(current_staff_id()))
