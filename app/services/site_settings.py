"""
Site settings accessor.

Settings live in a single ``site_settings`` row and are cached in Redis for
CACHE_TTL seconds. When the row is missing, SiteDefaults are served. Redis
being unreachable never fails a request: reads fall through to the database.
"""

import redis.asyncio as redis
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.logging import get_logger
from app.models.site_setting import SiteSettings
from app.schemas.site_setting import SiteSettingsResponse, SiteSettingsUpdate

logger = get_logger(__name__)

SITE_SETTINGS_CACHE_KEY = "site_settings"


class SiteSettingsService:
    """Cached read and write access to site settings."""

    def __init__(self, db: AsyncSession, redis_client: redis.Redis) -> None:  # type: ignore[type-arg]
        self.db = db
        self.redis = redis_client

    async def _read_cache(self) -> SiteSettingsResponse | None:
        try:
            cached = await self.redis.get(SITE_SETTINGS_CACHE_KEY)
        except redis.RedisError as e:
            logger.warning("settings_cache_unavailable", operation="get", error=str(e))
            return None
        if not cached:
            return None
        try:
            return SiteSettingsResponse.model_validate_json(cached)
        except PydanticValidationError:
            # Stale shape from an older release, reload from the database
            logger.warning("settings_cache_corrupt")
            return None

    async def _write_cache(self, data: SiteSettingsResponse) -> None:
        try:
            await self.redis.setex(SITE_SETTINGS_CACHE_KEY, settings.CACHE_TTL, data.model_dump_json())
        except redis.RedisError as e:
            logger.warning("settings_cache_unavailable", operation="set", error=str(e))

    async def invalidate_cache(self) -> None:
        try:
            await self.redis.delete(SITE_SETTINGS_CACHE_KEY)
        except redis.RedisError as e:
            logger.warning("settings_cache_unavailable", operation="delete", error=str(e))

    async def _load_row(self) -> SiteSettings | None:
        result = await self.db.execute(select(SiteSettings).order_by(SiteSettings.id).limit(1))  # type: ignore[arg-type]
        return result.scalar_one_or_none()

    async def get_settings(self) -> SiteSettingsResponse:
        """
        Current site settings.

        Order of lookup: Redis cache, then the database row, then defaults.
        Database and default results are written back to the cache.
        """
        cached = await self._read_cache()
        if cached is not None:
            return cached

        row = await self._load_row()
        data = SiteSettingsResponse.model_validate(row) if row else SiteSettingsResponse()
        await self._write_cache(data)
        return data

    async def comments_enabled(self) -> bool:
        """Site-wide comment switch."""
        return (await self.get_settings()).comments_enabled

    async def update_settings(self, data: SiteSettingsUpdate) -> SiteSettingsResponse:
        """
        Apply a partial update, creating the row on first write.

        Flushes but does not commit; the cached copy is dropped so the next
        read reloads it.
        """
        row = await self._load_row()
        if row is None:
            row = SiteSettings()

        for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(row, field, value)

        self.db.add(row)
        await self.db.flush()
        await self.db.refresh(row)
        await self.invalidate_cache()

        logger.info("site_settings_updated", fields=sorted(data.model_fields_set))
        return SiteSettingsResponse.model_validate(row)
