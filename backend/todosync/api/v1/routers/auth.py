# todosync/api/v1/routers/auth.py
import logging

from fastapi import APIRouter, Depends, Request, status

from todosync.api.v1.deps import get_current_session
from todosync.core.errors import InvalidInput, Locked, Unauthenticated
from todosync.schemas.auth import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    ProfileOut,
    RegisterRequest,
    SessionOut,
    UserOut,
)
from todosync.services import credentials, login_guard, sessions
from todosync.services.sessions import SessionContext

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger("uvicorn.error")

BAD_CREDENTIALS = "username or password incorrect"


def _user_out(user) -> UserOut:
    return UserOut(id=str(user.id), username=user.username, email=user.email)


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest):
    """
    Register a new user account.

    Returns:
        201 {"message", "user": {id, username, email}}

    Errors:
        400: a field is missing or the password is shorter than the minimum
        409: username or email already registered
    """
    user = await credentials.register(body.username, body.email, body.password)
    return {"message": "registered", "user": _user_out(user)}


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, request: Request):
    """
    Authenticate and open a new session.

    `username` may be the username or the email. Failed attempts are counted
    per submitted name; when the limit is reached the name is locked for a
    while and every login for it answers 423, even with the right password.

    Returns:
        200 {"message", "token", "user"}

    Errors:
        400: username or password missing
        401: credentials do not match (same message for unknown users)
        423: locked, body carries "locked_until"
    """
    if not body.username or not body.password:
        raise InvalidInput("username and password are required")

    await login_guard.check_lockout(body.username)

    user = await credentials.verify(body.username, body.password)
    if user is None:
        locked_until = await login_guard.record_failure(body.username)
        logger.warning("[auth] failed login for username=%s", body.username)
        if locked_until is not None:
            raise Locked(locked_until)
        raise Unauthenticated(BAD_CREDENTIALS)

    await login_guard.record_success(body.username)
    token = await sessions.issue(user, request.headers.get("user-agent"))
    logger.info("[auth] login user id=%s", user.id)
    return LoginResponse(message="logged in", token=token, user=_user_out(user))


@router.get("/me", response_model=ProfileOut)
async def me(current: SessionContext = Depends(get_current_session)):
    """
    Profile of the authenticated user: {id, username, email, created_at}.
    """
    user = await credentials.get_profile(current.user_id)
    return ProfileOut(id=str(user.id), username=user.username, email=user.email, created_at=user.created_at)


@router.post("/change-password")
async def change_password(body: ChangePasswordRequest, current: SessionContext = Depends(get_current_session)):
    """
    Change the caller's password.

    Errors:
        400: a field is missing or the new password is too short
        401: old password is wrong
    """
    await credentials.change_password(current.user_id, body.oldPassword, body.newPassword)
    return {"message": "password changed"}


@router.post("/logout")
async def logout(current: SessionContext = Depends(get_current_session)):
    """
    End the current session. The token stops working immediately even
    though its signature stays valid until it expires.
    """
    await sessions.revoke(current.token)
    logger.info("[auth] logout user id=%s session=%s", current.user_id, current.session_id)
    return {"message": "logged out"}


@router.get("/sessions", response_model=list[SessionOut])
async def list_sessions(current: SessionContext = Depends(get_current_session)):
    """
    The caller's sessions, newest first, without their tokens.
    """
    rows = await sessions.list_sessions(current.user_id)
    return [
        SessionOut(id=str(s.id), device_info=s.device_info, created_at=s.created_at, expires_at=s.expires_at)
        for s in rows
    ]


@router.post("/sessions/logout-other")
async def logout_other_sessions(current: SessionContext = Depends(get_current_session)):
    """
    Revoke every session of the caller except the one making this request.
    """
    revoked = await sessions.revoke_others(current.user_id, current.token)
    return {"message": "other devices logged out", "revoked": revoked}
