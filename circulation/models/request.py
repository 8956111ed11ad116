"""Book request model."""
from datetime import datetime
from enum import Enum as PyEnum
from typing import Optional

from pydantic import BaseModel, Field

from circulation.models.base import DocumentModel


class RequestStatus(str, PyEnum):
    """Request status enum."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    ISSUED = "issued"


# Requests only move forward along these edges
REQUEST_TRANSITIONS: dict[RequestStatus, frozenset[RequestStatus]] = {
    RequestStatus.PENDING: frozenset({RequestStatus.ACCEPTED, RequestStatus.REJECTED}),
    RequestStatus.ACCEPTED: frozenset({RequestStatus.ISSUED}),
    RequestStatus.REJECTED: frozenset(),
    RequestStatus.ISSUED: frozenset(),
}


class BookRequest(DocumentModel):
    """A member's request to borrow a title for a date window."""

    collection = "BookRequests"

    id: str
    member_id: str = Field(alias="memberID")
    book_id: str = Field(alias="bookID")
    status: RequestStatus = RequestStatus.PENDING
    start_date: Optional[datetime] = Field(None, alias="startDate")
    end_date: Optional[datetime] = Field(None, alias="endDate")
    created_at: datetime = Field(alias="createdAt")
    accepted_at: Optional[datetime] = Field(None, alias="acceptedAt")
    updated_at: datetime = Field(alias="updatedAt")

    def can_transition(self, target: RequestStatus) -> bool:
        return target in REQUEST_TRANSITIONS[self.status]

    def __repr__(self) -> str:
        return f"<BookRequest(id={self.id}, book_id={self.book_id}, status={self.status.value})>"


class RequestWindow(BaseModel):
    """Dates a member asks to borrow a title for."""

    start_date: datetime
    end_date: datetime
