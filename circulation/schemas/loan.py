"""Loan Pydantic schemas."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from circulation.models.loan import LoanStatus
from circulation.schemas.common import BaseSchema, ErrorResponse


class DamageReport(BaseModel):
    """Body for closing a loan as damaged."""

    replace_copy: bool = False


class LoanResponse(BaseSchema):
    """Schema for loan response."""

    id: str
    member_id: str
    book_id: str
    request_id: str
    status: LoanStatus
    issue_date: datetime
    due_date: datetime
    return_date: Optional[datetime] = None
    fine_id: Optional[str] = None


class IssueBatchResponse(BaseModel):
    """Loans created by a bulk issue and the requests that failed."""

    loans: list[LoanResponse]
    failures: dict[str, ErrorResponse]
