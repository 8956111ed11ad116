"""Fine Pydantic schemas."""
from datetime import datetime
from typing import Optional

from circulation.models.fine import FineReason, FineStatus
from circulation.schemas.common import BaseSchema


class FineResponse(BaseSchema):
    """Schema for fine response."""

    id: str
    member_id: str
    transaction_id: str
    amount: float
    reason: FineReason
    status: FineStatus
    created_at: datetime
    paid_at: Optional[datetime] = None
