"""Fine API routes."""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from circulation.dependencies import get_engine
from circulation.engine import LendingEngine
from circulation.models.fine import FineStatus
from circulation.schemas.fine import FineResponse

router = APIRouter(prefix="/fines", tags=["Fines"])


@router.get("", response_model=list[FineResponse])
async def list_fines(
    status_filter: Optional[FineStatus] = Query(None, alias="status"),
    member_id: Optional[str] = None,
    engine: LendingEngine = Depends(get_engine),
) -> list[FineResponse]:
    fines = await engine.fines.list_fines(status=status_filter, member_id=member_id)
    return [FineResponse.model_validate(fine) for fine in fines]


@router.get("/{fine_id}", response_model=FineResponse)
async def get_fine(
    fine_id: str,
    engine: LendingEngine = Depends(get_engine),
) -> FineResponse:
    return FineResponse.model_validate(await engine.fines.get_fine(fine_id))


@router.post("/{fine_id}/toggle", response_model=FineResponse)
async def toggle_fine(
    fine_id: str,
    engine: LendingEngine = Depends(get_engine),
) -> FineResponse:
    """Flip a fine between pending and paid."""
    return FineResponse.model_validate(await engine.toggle_fine(fine_id))
