"""Book request Pydantic schemas."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from circulation.models.request import RequestStatus
from circulation.schemas.common import BaseSchema


class RequestCreate(BaseModel):
    """Schema for a member's book request."""

    member_id: str = Field(..., min_length=1)
    book_id: str = Field(..., min_length=1)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class RequestResponse(BaseSchema):
    """Schema for book request response."""

    id: str
    member_id: str
    book_id: str
    status: RequestStatus
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    created_at: datetime
    accepted_at: Optional[datetime] = None
    updated_at: datetime
