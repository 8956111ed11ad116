"""Library settings API routes."""
from fastapi import APIRouter, Depends

from circulation.dependencies import get_engine
from circulation.engine import LendingEngine
from circulation.models.library_settings import LibrarySettings
from circulation.schemas.library_settings import SettingsResponse, SettingsUpdate

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("", response_model=SettingsResponse)
async def get_library_settings(engine: LendingEngine = Depends(get_engine)) -> SettingsResponse:
    return SettingsResponse.model_validate(await engine.current_settings())


@router.put("", response_model=SettingsResponse)
async def update_library_settings(
    settings_data: SettingsUpdate,
    engine: LendingEngine = Depends(get_engine),
) -> SettingsResponse:
    """Replace the fine and duration policy for future loans."""
    saved = await engine.save_settings(LibrarySettings(**settings_data.model_dump()))
    return SettingsResponse.model_validate(saved)
