"""Loan (transaction) model."""
from datetime import datetime
from enum import Enum as PyEnum
from typing import Optional

from pydantic import Field

from circulation.models.base import DocumentModel


class LoanStatus(str, PyEnum):
    """Loan status enum."""
    ISSUED = "issued"
    RETURNED = "returned"
    DAMAGED = "damaged"
    LOST = "lost"


CLOSED_STATUSES = frozenset({LoanStatus.RETURNED, LoanStatus.DAMAGED, LoanStatus.LOST})


class Loan(DocumentModel):
    """Record of a copy in a member's possession.

    Stored in the ``Transactions`` collection. ``return_date`` is set exactly
    when the loan has reached one of the closed statuses.
    """

    collection = "Transactions"

    id: str
    member_id: str = Field(alias="memberID")
    book_id: str = Field(alias="bookID")
    request_id: str = Field(alias="requestID")
    status: LoanStatus = LoanStatus.ISSUED
    issue_date: datetime = Field(alias="issueDate")
    due_date: datetime = Field(alias="dueDate")
    return_date: Optional[datetime] = Field(None, alias="returnDate")
    fine_id: Optional[str] = Field(None, alias="fineID")

    @property
    def is_open(self) -> bool:
        return self.status == LoanStatus.ISSUED

    def is_overdue(self, now: datetime) -> bool:
        return self.is_open and self.due_date < now

    def __repr__(self) -> str:
        return f"<Loan(id={self.id}, book_id={self.book_id}, status={self.status.value})>"
