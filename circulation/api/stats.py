"""Dashboard API routes."""
from fastapi import APIRouter, Depends

from circulation.dependencies import get_engine
from circulation.engine import LendingEngine
from circulation.schemas.stats import StatsResponse

router = APIRouter(prefix="/stats", tags=["Stats"])


@router.get("", response_model=StatsResponse)
async def get_stats(engine: LendingEngine = Depends(get_engine)) -> dict:
    """Counts derived from the latest loan, fine and request snapshots."""
    projections = engine.projections
    return {
        "issued_count": projections.issued_count,
        "overdue_count": projections.overdue_count(),
        "pending_fines_count": projections.pending_fines_count,
        "pending_requests_count": projections.pending_requests_count,
        "active_members": projections.active_members(),
        "issued_per_day": [
            {"date": day, "count": count} for day, count in projections.issued_per_day()
        ],
    }
