# todosync/core/errors.py
"""
Service-layer exceptions.

Each class fixes the HTTP status it maps to; api/error_handling.py turns any of them
into a `{"error": "<message>"}` response. Extra keys in `detail` are merged
into that body.
"""
from __future__ import annotations

import datetime as dt
from typing import Optional


class ServiceError(Exception):
    """Base class for errors raised by services and the auth gate."""

    status_code: int = 400

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        detail: Optional[dict] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.detail = detail or {}


class InvalidInput(ServiceError):
    """Missing or malformed field (400)."""
    status_code = 400


class Unauthenticated(ServiceError):
    """No usable credential, or the session behind it is gone (401)."""
    status_code = 401


class InvalidToken(Unauthenticated):
    """Token signature failed or the token itself has expired (403)."""
    status_code = 403


class Forbidden(ServiceError):
    """Resource belongs to another user (403)."""
    status_code = 403


class SessionExpired(Forbidden):
    """Session record found but past its expires_at (403)."""
    status_code = 403


class NotFound(ServiceError):
    status_code = 404


class Conflict(ServiceError):
    """Duplicate username or email (409)."""
    status_code = 409


class Locked(ServiceError):
    """Login refused until `until` because of repeated failures (423)."""

    status_code = 423

    def __init__(self, until: dt.datetime) -> None:
        self.until = until
        super().__init__(
            f"account locked until {until.isoformat()}",
            detail={"locked_until": until.isoformat()},
        )


class Internal(ServiceError):
    status_code = 500
