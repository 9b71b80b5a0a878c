from __future__ import annotations

from datetime import datetime
from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a staff account lacks permission for an action."""


class NotFoundError(DomainError):
    """Unknown member, session or staff account."""


class ConflictError(DomainError):
    """Raised when opening a session while another one is active."""


class InvalidStateError(DomainError):
    """Raised when closing a session that is already closed."""


class NoActiveSessionError(DomainError):
    """No attendance session is open."""


class DuplicateRequestError(DomainError):
    """An outstanding code already exists for this member and session."""

    def __init__(self, message: str, *, expires_at: Optional[datetime] = None):
        super().__init__(message)
        self.expires_at = expires_at


class NotRequestedError(DomainError):
    """No unused code was issued for this member and session."""


class ExpiredError(DomainError):
    """The code expired before it was verified."""


class AttemptsExceededError(DomainError):
    """The code has used up its verification attempts."""


class MismatchError(DomainError):
    """The submitted code does not match."""

    def __init__(self, message: str, *, remaining_attempts: int):
        super().__init__(message)
        self.remaining_attempts = remaining_attempts


class DuplicateAttendanceError(DomainError):
    """Attendance already recorded for this member and session."""


class DeliveryFailedError(DomainError):
    """The code was stored but could not be handed to the delivery channel."""


class RateLimitedError(DomainError):
    """Too many requests for the same identity within the window."""

    def __init__(self, message: str, *, retry_after: int):
        super().__init__(message)
        self.retry_after = retry_after


class StorageError(DomainError):
    """Wraps database failures that are not classified otherwise."""


class DuplicateKeyError(StorageError):
    """A unique index rejected a write; repositories translate it."""
