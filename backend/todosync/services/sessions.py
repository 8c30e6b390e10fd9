# todosync/services/sessions.py
"""
Session registry.

A bearer token is accepted only when both checks pass, in this order:
  1. the JWT signature and `exp` claim verify (no database access)
  2. a Session row holds exactly this token and has not passed expires_at
The second check is what lets logout revoke a token whose signature is still valid.
"""
import logging
import uuid
from dataclasses import dataclass
from typing import List, Optional

import jwt

from todosync.core import clock
from todosync.core.errors import InvalidToken, SessionExpired, Unauthenticated
from todosync.core.security import SESSION_TTL, create_session_token, decode_session_token
from todosync.models.session import Session
from todosync.models.user import User

logger = logging.getLogger("uvicorn.error")


@dataclass(frozen=True)
class SessionContext:
    """Result of a successful validation, handed to route handlers."""
    user_id: str
    username: str
    email: str
    session_id: str
    token: str


async def issue(user: User, device_info: Optional[str] = None) -> str:
    """
    Sign a token for `user` and persist the matching Session row.
    """
    now = clock.utc_now()
    expires_at = now + SESSION_TTL
    session_id = uuid.uuid4()
    token = create_session_token(
        user_id=str(user.id),
        username=user.username,
        email=user.email,
        session_id=str(session_id),
        issued_at=now,
        expires_at=expires_at,
    )
    await Session.create(
        id=session_id,
        user_id=user.id,
        token=token,
        device_info=(device_info or "unknown")[:512],
        expires_at=expires_at,
    )
    logger.info("[auth] session issued user id=%s session=%s", user.id, session_id)
    return token


async def validate(token: Optional[str]) -> SessionContext:
    """
    Resolve a bearer token to its session.

    Raises:
        Unauthenticated: no token, or no Session row carries it (logged out / revoked)
        InvalidToken: malformed token or bad signature
        SessionExpired: the JWT or its Session row has expired; the row is deleted first
    """
    if not token:
        raise Unauthenticated("missing authentication token")

    try:
        claims = decode_session_token(token)
    except jwt.ExpiredSignatureError:
        # signature already verified; the row behind it is stale
        removed = await Session.filter(token=token).delete()
        if removed:
            logger.debug("[auth] removed expired session (token exp passed)")
        raise SessionExpired("session has expired")
    except jwt.InvalidTokenError:
        raise InvalidToken("token is invalid or expired")

    session = await Session.get_or_none(token=token)
    if session is None:
        raise Unauthenticated("session not found or logged out")

    if clock.as_utc(session.expires_at) <= clock.utc_now():
        await Session.filter(id=session.id).delete()
        logger.debug("[auth] removed expired session=%s", session.id)
        raise SessionExpired("session has expired")

    return SessionContext(
        user_id=claims["sub"],
        username=claims.get("username", ""),
        email=claims.get("email", ""),
        session_id=claims["sid"],
        token=token,
    )


async def revoke(token: str) -> None:
    """Delete the session holding `token`. Unknown tokens are ignored."""
    await Session.filter(token=token).delete()


async def revoke_others(user_id: str, except_token: str) -> int:
    """Delete every session of the user except the one holding `except_token`."""
    removed = await Session.filter(user_id=user_id).exclude(token=except_token).delete()
    logger.info("[auth] revoked %s other session(s) for user id=%s", removed, user_id)
    return removed


async def list_sessions(user_id: str) -> List[Session]:
    """All sessions of the user, newest first."""
    return await Session.filter(user_id=user_id).order_by("-created_at")
