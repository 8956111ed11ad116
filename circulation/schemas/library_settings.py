"""Library settings Pydantic schemas."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from circulation.schemas.common import BaseSchema


class SettingsUpdate(BaseModel):
    """Schema for replacing the library settings."""

    max_borrowing_days: int = Field(7, ge=1)
    late_return_fine: float = Field(5.0, ge=0)
    damaged_book_percentage: float = Field(60.0, ge=0, le=100)
    lost_book_percentage: float = Field(85.0, ge=0, le=100)
    reservation_duration: int = Field(12, ge=1)


class SettingsResponse(BaseSchema):
    """Schema for library settings response."""

    max_borrowing_days: int
    late_return_fine: float
    damaged_book_percentage: float
    lost_book_percentage: float
    reservation_duration: int
    last_updated: Optional[datetime] = None
