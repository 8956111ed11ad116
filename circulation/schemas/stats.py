"""Dashboard Pydantic schemas."""
import datetime as dt

from pydantic import BaseModel


class DailyCount(BaseModel):
    date: dt.date
    count: int


class StatsResponse(BaseModel):
    """Live circulation figures."""

    issued_count: int
    overdue_count: int
    pending_fines_count: int
    pending_requests_count: int
    active_members: dict[str, int]
    issued_per_day: list[DailyCount]
