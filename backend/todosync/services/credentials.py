# todosync/services/credentials.py
"""
Credential store: account creation, credential checks and password changes.
Hashing runs in the threadpool so an Argon2 round does not stall the event loop.
"""
import logging
from typing import Optional

from starlette.concurrency import run_in_threadpool
from tortoise.exceptions import IntegrityError
from tortoise.expressions import Q

from todosync.config import settings
from todosync.core.errors import Conflict, InvalidInput, NotFound, Unauthenticated
from todosync.core.security import hash_password, verify_password
from todosync.models.user import User

logger = logging.getLogger("uvicorn.error")


def _check_password_length(password: str, label: str = "password") -> None:
    if len(password) < settings.min_password_length:
        raise InvalidInput(f"{label} must be at least {settings.min_password_length} characters")


async def register(username: str, email: str, password: str) -> User:
    """
    Create a new account.

    Raises:
        InvalidInput: a field is empty or the password is too short
        Conflict: username or email already taken
    """
    username = (username or "").strip()
    email = (email or "").strip()
    if not username or not email or not password:
        raise InvalidInput("username, email and password are required")
    _check_password_length(password)

    if await User.filter(Q(username=username) | Q(email=email)).exists():
        raise Conflict("username or email already exists")

    password_hash = await run_in_threadpool(hash_password, password)
    try:
        user = await User.create(username=username, email=email, password_hash=password_hash)
    except IntegrityError:
        # A concurrent registration won the unique index
        raise Conflict("username or email already exists")
    logger.info("[auth] registered user id=%s username=%s", user.id, user.username)
    return user


async def verify(username_or_email: str, password: str) -> Optional[User]:
    """
    Return the user whose username OR email matches and whose hash accepts
    the password, else None. Unknown user and wrong password look the same.
    """
    user = await User.filter(Q(username=username_or_email) | Q(email=username_or_email)).first()
    if user is None:
        return None
    if not await run_in_threadpool(verify_password, password, user.password_hash):
        return None
    return user


async def change_password(user_id: str, old_password: str, new_password: str) -> None:
    """
    Replace the password hash after checking the old password.

    The length rule is checked first so a short new password is rejected
    whatever the old password was.
    """
    if not old_password or not new_password:
        raise InvalidInput("oldPassword and newPassword are required")
    _check_password_length(new_password, "new password")

    user = await User.get_or_none(id=user_id)
    if user is None or not await run_in_threadpool(verify_password, old_password, user.password_hash):
        raise Unauthenticated("old password is incorrect")

    user.password_hash = await run_in_threadpool(hash_password, new_password)
    await user.save()
    logger.info("[auth] password changed for user id=%s", user.id)


async def get_profile(user_id: str) -> User:
    user = await User.get_or_none(id=user_id)
    if user is None:
        raise NotFound("user not found")
    return user
