# problemlog/api/settings/main.py
from typing import Any, Dict

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.config import get_settings
from ...core.users import require_settings
from ...db.engine import get_session
from ...models.user import User
from ...services.settings_service import SettingsService

router = APIRouter()


async def get_settings_service(
    session: AsyncSession = Depends(get_session),
) -> SettingsService:
    return SettingsService(session)


@router.get("/settings/branding", response_model=Dict[str, Any])
async def api_get_branding(service: SettingsService = Depends(get_settings_service)):
    """Public: the login page is rendered before anyone signs in."""
    return await service.get_all_settings()


@router.put("/settings/branding", response_model=Dict[str, Any])
async def api_update_branding(
    settings: Dict[str, Any],
    service: SettingsService = Depends(get_settings_service),
    current_user: User = Depends(require_settings),
):
    try:
        return await service.update_settings(settings, current_user)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/settings/branding", response_model=Dict[str, Any])
async def api_reset_branding(
    service: SettingsService = Depends(get_settings_service),
    current_user: User = Depends(require_settings),
):
    return await service.reset_settings(current_user)


@router.post("/settings/branding/{key}/image", response_model=Dict[str, Any])
async def api_upload_branding_image(
    key: str,
    file: UploadFile = File(...),
    service: SettingsService = Depends(get_settings_service),
    current_user: User = Depends(require_settings),
):
    try:
        return await service.upload_branding_image(key, file, get_settings().upload_dir, current_user)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
