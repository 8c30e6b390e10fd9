# todosync/services/login_guard.py
"""
Login attempt guard.

Per username: Clear -> Counting(n) -> Locked(until) -> Clear once `until` passes.
Counters live in the failed_logins table so every worker process sees the
same state and a restart does not unlock an account.
"""
import datetime as dt
import logging
from typing import Optional

from tortoise.expressions import F
from tortoise.transactions import in_transaction

from todosync.config import settings
from todosync.core import clock
from todosync.core.errors import Locked
from todosync.models.login_attempt import LoginAttempt

logger = logging.getLogger("uvicorn.error")

LOCK_THRESHOLD = settings.lock_threshold
LOCK_WINDOW = dt.timedelta(minutes=settings.lock_minutes)


async def check_lockout(username: str) -> None:
    """
    Raise Locked while a lock is active for this username.
    Called before credentials are looked at, so a correct password does not help.
    """
    record = await LoginAttempt.get_or_none(username=username)
    if record is None or record.locked_until is None:
        return
    until = clock.as_utc(record.locked_until)
    if until > clock.utc_now():
        raise Locked(until)


async def record_failure(username: str) -> Optional[dt.datetime]:
    """
    Count one failed login. Returns the lock deadline when this failure
    reaches the threshold, otherwise None.
    """
    now = clock.utc_now()
    async with in_transaction():
        record, _ = await LoginAttempt.get_or_create(username=username, defaults={"attempts": 0})
        if record.locked_until is not None and clock.as_utc(record.locked_until) <= now:
            # previous lock ran out: start counting again
            await LoginAttempt.filter(username=username).update(attempts=0, locked_until=None)

        await LoginAttempt.filter(username=username).update(
            attempts=F("attempts") + 1,
            last_attempt=now,
        )
        await record.refresh_from_db()

        if record.attempts < LOCK_THRESHOLD:
            return None
        if record.locked_until is None:
            record.locked_until = now + LOCK_WINDOW
            await record.save(update_fields=["locked_until"])
            logger.info("[auth] login locked username=%s until=%s", username, record.locked_until.isoformat())
        return clock.as_utc(record.locked_until)


async def record_success(username: str) -> None:
    """Forget all failures for this username."""
    await LoginAttempt.filter(username=username).delete()
