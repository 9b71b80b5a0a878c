from __future__ import annotations

import logging
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from enum import Enum
from functools import wraps
from typing import Any, Optional

from flask import Flask, jsonify, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DeliveryFailedError,
    DomainError,
    DuplicateAttendanceError,
    DuplicateRequestError,
    MismatchError,
    NotFoundError,
    RateLimitedError,
    StorageError,
)

logger = logging.getLogger(__name__)

# Order matters: first match wins, so subclasses go before their bases.
_STATUS_BY_ERROR = (
    (NotFoundError, 404),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (ConflictError, 409),
    (DuplicateAttendanceError, 409),
    (DuplicateRequestError, 409),
    (RateLimitedError, 429),
    (DeliveryFailedError, 502),
    (StorageError, 503),
)


def status_for(exc: DomainError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    return 400


def to_json(value: Any) -> Any:
    """Turn dataclasses, enums and dates into plain JSON values."""
    if is_dataclass(value) and not isinstance(value, type):
        return {k: to_json(v) for k, v in asdict(value).items()}
    if isinstance(value, dict):
        return {k: to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(v) for v in value]
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def ok(data: Any = None, message: Optional[str] = None, status: int = 200):
    body: dict = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = to_json(data)
    return jsonify(body), status


def fail(message: str, status: int = 400, **extra):
    body: dict = {"success": False, "message": message}
    body.update({k: to_json(v) for k, v in extra.items()})
    return jsonify(body), status


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        status = status_for(exc)
        extra: dict = {}
        if isinstance(exc, MismatchError):
            extra["remainingAttempts"] = exc.remaining_attempts
        elif isinstance(exc, DuplicateRequestError) and exc.expires_at is not None:
            extra["expiresAt"] = exc.expires_at
        elif isinstance(exc, StorageError):
            logger.error("Storage failure: %s", exc)
            return fail("Service temporarily unavailable", status)

        response, status = fail(str(exc), status, **extra)
        if isinstance(exc, RateLimitedError):
            response.headers["Retry-After"] = str(exc.retry_after)
        return response, status


def current_staff_id() -> int:
    return int(session["staff_id"])


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "staff_id" not in session:
            raise AuthenticationError("Please log in to continue")
        return view(*args, **kwargs)

    return wrapper


def staff_required(view):
    """Any logged-in staff account (admin or staff role) may run attendance."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if "staff_id" not in session:
            raise AuthenticationError("Please log in to continue")
        if session.get("role") not in (Role.ADMIN.value, Role.STAFF.value):
            raise AuthorizationError("Staff access required")
        return view(*args, **kwargs)

    return wrapper
