"""Library policy snapshot."""
from datetime import datetime, timedelta
from typing import Optional

from pydantic import Field

from circulation.models.base import DocumentModel

SETTINGS_DOCUMENT_ID = "library"


class LibrarySettings(DocumentModel):
    """Fine and duration policy in effect at the moment of a computation."""

    collection = "Settings"

    id: str = SETTINGS_DOCUMENT_ID
    max_borrowing_days: int = Field(7, ge=1, alias="maxBorrowingDays")
    late_return_fine: float = Field(5.0, ge=0, alias="lateReturnFine")
    damaged_book_percentage: float = Field(60.0, ge=0, le=100, alias="damagedBookPercentage")
    lost_book_percentage: float = Field(85.0, ge=0, le=100, alias="lostBookPercentage")
    reservation_duration: int = Field(12, ge=1, alias="reservationDuration")  # hours
    last_updated: Optional[datetime] = Field(None, alias="lastUpdated")

    model_config = {"frozen": True}

    @property
    def borrowing_period(self) -> timedelta:
        return timedelta(days=self.max_borrowing_days)

    @property
    def reservation_period(self) -> timedelta:
        return timedelta(hours=self.reservation_duration)
