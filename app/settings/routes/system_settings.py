"""Admin routes for system settings."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.auth.dependencies import require_admin
from app.auth.models.user import User
from app.db.session import get_db
from app.settings.schemas.system_setting import SystemSettingResponse, SystemSettingUpdate
from app.settings.services.system_settings_service import SystemSettingsService

router = APIRouter(prefix="/settings", tags=["admin-settings"])


@router.get("", response_model=list[SystemSettingResponse])
async def list_settings(
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> list[SystemSettingResponse]:
    return SystemSettingsService(db).get_all()


@router.get("/{key}", response_model=SystemSettingResponse)
async def get_setting(
    key: str,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> SystemSettingResponse:
    return SystemSettingsService(db).get_by_key(key)


@router.put("/{key}", response_model=SystemSettingResponse)
async def update_setting(
    key: str,
    data: SystemSettingUpdate,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> SystemSettingResponse:
    """Create or update a setting.

    Reports already returned keep the percentage they were computed with.
    """
    return SystemSettingsService(db).update(key, data.value, data.description)
