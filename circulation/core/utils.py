"""Small helpers shared by the services."""
import uuid
from datetime import date, datetime, timedelta, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    """Return a new unique document id.

    Ids are allocated client-side so a unit of work can link documents it
    creates before anything is committed.
    """
    return uuid.uuid4().hex


def whole_days_between(start: datetime, end: datetime) -> int:
    """Number of complete days from ``start`` to ``end`` (negative if ``end`` is earlier)."""
    delta = end - start
    if delta < timedelta(0):
        return -((-delta).days)
    return delta.days


def to_date(value: datetime) -> date:
    return value.astimezone(timezone.utc).date()
