# todosync/core/clock.py
"""
Single source of "now" for lockout windows and session expiry.
Services call clock.utc_now() through the module so tests can patch it.
"""
import datetime as dt


def utc_now() -> dt.datetime:
    """Current UTC time, timezone-aware."""
    return dt.datetime.now(dt.timezone.utc)


def as_utc(value: dt.datetime) -> dt.datetime:
    """Treat naive datetimes coming back from the database as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc)
