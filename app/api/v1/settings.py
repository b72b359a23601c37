"""
Admin site settings endpoints
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import SiteSettingsDep
from app.core.auth import AdminUser
from app.core.database import get_db
from app.schemas.common import ApiResponse
from app.schemas.site_setting import SiteSettingsResponse, SiteSettingsUpdate

router = APIRouter(prefix="/admin/settings", tags=["admin"])


@router.get("", response_model=ApiResponse[SiteSettingsResponse])
async def get_site_settings(
    _admin: AdminUser,
    site: SiteSettingsDep,
) -> ApiResponse[SiteSettingsResponse]:
    """Current site settings (defaults when none have been saved yet)."""
    return ApiResponse[SiteSettingsResponse](data=await site.get_settings())


@router.put("", response_model=ApiResponse[SiteSettingsResponse])
async def update_site_settings(
    _admin: AdminUser,
    settings_data: SiteSettingsUpdate,
    site: SiteSettingsDep,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse[SiteSettingsResponse]:
    """
    Update site settings.

    Only the provided fields change. Setting `comments_enabled` to false
    hides all comments publicly and rejects new submissions.
    """
    updated = await site.update_settings(settings_data)
    await db.commit()
    # Drop any copy cached by a read that raced the commit
    await site.invalidate_cache()
    return ApiResponse[SiteSettingsResponse](data=updated, message="Settings updated")
