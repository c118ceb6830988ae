"""Endpoints for viewing and updating site-wide settings."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from qemaker.database import get_session
from qemaker.models import Admin, Settings
from qemaker.auth import get_current_admin
from qemaker.schemas import SettingsRead, SettingsUpdate
from qemaker.crud import get_settings, save_settings

router = APIRouter(prefix="/settings", tags=["settings"])


def _to_read(settings: Settings) -> SettingsRead:
    return SettingsRead(
        site_name=settings.site_name,
        pass_threshold=settings.pass_threshold,
        default_max_attempts=settings.default_max_attempts,
        default_time_limit_minutes=settings.default_time_limit_minutes,
        timer_warning_seconds=settings.timer_warning_seconds,
    )


@router.get("/", response_model=SettingsRead)
async def read_settings(db: AsyncSession = Depends(get_session)):
    """Retrieve the current configuration values."""
    return _to_read(await get_settings(db))


@router.put("/", response_model=SettingsRead)
async def update_settings(
    data: SettingsUpdate,
    db: AsyncSession = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
):
    """Update settings; any signed-in admin may change configuration."""
    settings = await get_settings(db)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(settings, field, value)
    return _to_read(await save_settings(db, settings))
