"""Book request API routes."""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from circulation.core.exceptions import ValidationError
from circulation.dependencies import get_engine
from circulation.engine import LendingEngine
from circulation.models.request import RequestStatus, RequestWindow
from circulation.schemas.loan import LoanResponse
from circulation.schemas.request import RequestCreate, RequestResponse

router = APIRouter(prefix="/requests", tags=["Requests"])


@router.get("", response_model=list[RequestResponse])
async def list_requests(
    status_filter: Optional[RequestStatus] = Query(None, alias="status"),
    member_id: Optional[str] = None,
    engine: LendingEngine = Depends(get_engine),
) -> list[RequestResponse]:
    """List requests, oldest first."""
    requests = await engine.requests.list_requests(status=status_filter, member_id=member_id)
    return [RequestResponse.model_validate(r) for r in requests]


@router.post("", response_model=RequestResponse, status_code=status.HTTP_201_CREATED)
async def submit_request(
    request_data: RequestCreate,
    engine: LendingEngine = Depends(get_engine),
) -> RequestResponse:
    """Create a pending request for a member."""
    window = None
    if request_data.start_date or request_data.end_date:
        if not (request_data.start_date and request_data.end_date):
            raise ValidationError(
                "start_date and end_date must be given together", field="end_date"
            )
        window = RequestWindow(
            start_date=request_data.start_date, end_date=request_data.end_date
        )
    return RequestResponse.model_validate(
        await engine.submit_request(request_data.member_id, request_data.book_id, window)
    )


@router.get("/{request_id}", response_model=RequestResponse)
async def get_request(
    request_id: str,
    engine: LendingEngine = Depends(get_engine),
) -> RequestResponse:
    return RequestResponse.model_validate(await engine.requests.get_request(request_id))


@router.post("/{request_id}/accept", response_model=RequestResponse)
async def accept_request(
    request_id: str,
    engine: LendingEngine = Depends(get_engine),
) -> RequestResponse:
    """Reserve a copy and accept the request."""
    return RequestResponse.model_validate(await engine.accept_request(request_id))


@router.post("/{request_id}/reject", response_model=RequestResponse)
async def reject_request(
    request_id: str,
    engine: LendingEngine = Depends(get_engine),
) -> RequestResponse:
    return RequestResponse.model_validate(await engine.reject_request(request_id))


@router.post(
    "/{request_id}/issue",
    response_model=LoanResponse,
    status_code=status.HTTP_201_CREATED,
)
async def issue_request(
    request_id: str,
    engine: LendingEngine = Depends(get_engine),
) -> LoanResponse:
    """Issue the reserved copy of an accepted request."""
    return LoanResponse.model_validate(await engine.issue(request_id))
