"""Loan API routes."""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from circulation.dependencies import get_engine
from circulation.engine import LendingEngine
from circulation.models.loan import LoanStatus
from circulation.schemas.common import ErrorResponse
from circulation.schemas.loan import DamageReport, IssueBatchResponse, LoanResponse

router = APIRouter(prefix="/loans", tags=["Loans"])


@router.get("", response_model=list[LoanResponse])
async def list_loans(
    status_filter: Optional[LoanStatus] = Query(None, alias="status"),
    member_id: Optional[str] = None,
    engine: LendingEngine = Depends(get_engine),
) -> list[LoanResponse]:
    loans = await engine.ledger.list_loans(status=status_filter, member_id=member_id)
    return [LoanResponse.model_validate(loan) for loan in loans]


@router.get("/members/{member_id}/borrowed", response_model=list[LoanResponse])
async def borrowed_loans(
    member_id: str,
    engine: LendingEngine = Depends(get_engine),
) -> list[LoanResponse]:
    """Open loans of a member, soonest due first."""
    loans = await engine.ledger.borrowed_loans(member_id)
    return [LoanResponse.model_validate(loan) for loan in loans]


@router.get("/members/{member_id}/completed", response_model=list[LoanResponse])
async def completed_loans(
    member_id: str,
    engine: LendingEngine = Depends(get_engine),
) -> list[LoanResponse]:
    """Closed loans of a member, latest first."""
    loans = await engine.ledger.completed_loans(member_id)
    return [LoanResponse.model_validate(loan) for loan in loans]


@router.post("/members/{member_id}/issue", response_model=IssueBatchResponse)
async def issue_all(
    member_id: str,
    engine: LendingEngine = Depends(get_engine),
) -> dict:
    """Issue every accepted request of a member."""
    batch = await engine.issue_all(member_id)
    return {
        "loans": [LoanResponse.model_validate(loan) for loan in batch.loans],
        "failures": {
            request_id: ErrorResponse(
                detail=exc.message, error_code=exc.error_code, details=exc.details
            )
            for request_id, exc in batch.failures.items()
        },
    }


@router.get("/{loan_id}", response_model=LoanResponse)
async def get_loan(
    loan_id: str,
    engine: LendingEngine = Depends(get_engine),
) -> LoanResponse:
    return LoanResponse.model_validate(await engine.ledger.get_loan(loan_id))


@router.post("/{loan_id}/return", response_model=LoanResponse)
async def return_loan(
    loan_id: str,
    engine: LendingEngine = Depends(get_engine),
) -> LoanResponse:
    """Check a copy back in, fining late returns."""
    return LoanResponse.model_validate(await engine.return_loan(loan_id))


@router.post("/{loan_id}/damaged", response_model=LoanResponse)
async def mark_damaged(
    loan_id: str,
    report: Optional[DamageReport] = None,
    engine: LendingEngine = Depends(get_engine),
) -> LoanResponse:
    replace_copy = report.replace_copy if report else False
    loan = await engine.mark_damaged(loan_id, replace_copy=replace_copy)
    return LoanResponse.model_validate(loan)


@router.post("/{loan_id}/lost", response_model=LoanResponse)
async def mark_lost(
    loan_id: str,
    engine: LendingEngine = Depends(get_engine),
) -> LoanResponse:
    return LoanResponse.model_validate(await engine.mark_lost(loan_id))
