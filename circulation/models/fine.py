"""Fine model."""
from datetime import datetime
from enum import Enum as PyEnum
from typing import Optional

from pydantic import Field

from circulation.models.base import DocumentModel


class FineReason(str, PyEnum):
    """Why a loan was fined."""
    LATE = "late"
    DAMAGED = "damaged"
    LOST = "lost"


class FineStatus(str, PyEnum):
    """Fine status enum."""
    PENDING = "pending"
    PAID = "paid"


class Fine(DocumentModel):
    """Monetary penalty attached to one loan."""

    collection = "Fines"

    id: str
    member_id: str = Field(alias="memberID")
    transaction_id: str = Field(alias="transactionID")
    amount: float = Field(ge=0)
    reason: FineReason
    status: FineStatus = FineStatus.PENDING
    created_at: datetime = Field(alias="createdAt")
    paid_at: Optional[datetime] = Field(None, alias="paidAt")

    def __repr__(self) -> str:
        return f"<Fine(id={self.id}, amount={self.amount}, status={self.status.value})>"
