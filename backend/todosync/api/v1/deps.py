from fastapi import Header

from todosync.services import sessions
from todosync.services.sessions import SessionContext


def bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an `Authorization: Bearer xxx` header value."""
    if authorization and authorization.lower().startswith("bearer "):
        return authorization.split(" ", 1)[1].strip() or None
    return None


async def get_current_session(
    authorization: str | None = Header(default=None),
) -> SessionContext:
    """
    FastAPI dependency guarding every authenticated route.

    Runs the full session validation (signature, then the Session row) and
    returns the caller's claims plus the token itself, which logout and
    "log out other devices" need.

    Raises (rendered by the exception handlers):
        Unauthenticated (401): no bearer token, or the session was revoked
        InvalidToken (403): bad signature or expired token
        SessionExpired (403): the session row has expired and was removed

    Usage:
        @router.get("/protected")
        async def protected_route(current: SessionContext = Depends(get_current_session)):
            return {"user_id": current.user_id}
    """
    return await sessions.validate(bearer_token(authorization))
