"""
Tests for the cached site settings accessor.
"""

import json

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import SiteDefaults, settings
from app.models.site_setting import SiteSettings
from app.schemas.site_setting import SiteSettingsUpdate
from app.services.site_settings import SITE_SETTINGS_CACHE_KEY, SiteSettingsService


class TestGetSettings:
    """Tests for SiteSettingsService.get_settings()."""

    async def test_defaults_when_no_row(self, db_session: AsyncSession, fake_redis):
        service = SiteSettingsService(db_session, fake_redis)

        data = await service.get_settings()

        assert data.site_name == SiteDefaults.SITE_NAME
        assert data.comments_enabled is True

    async def test_reads_row_and_caches_it(self, db_session: AsyncSession, fake_redis):
        db_session.add(SiteSettings(site_name="My Blog", comments_enabled=False))
        await db_session.commit()
        service = SiteSettingsService(db_session, fake_redis)

        data = await service.get_settings()

        assert data.site_name == "My Blog"
        assert await service.comments_enabled() is False
        assert json.loads(fake_redis.store[SITE_SETTINGS_CACHE_KEY])["site_name"] == "My Blog"
        assert fake_redis.ttls[SITE_SETTINGS_CACHE_KEY] == settings.CACHE_TTL

    async def test_cache_hit_skips_database(self, db_session: AsyncSession, fake_redis):
        db_session.add(SiteSettings(site_name="From DB"))
        await db_session.commit()
        fake_redis.store[SITE_SETTINGS_CACHE_KEY] = json.dumps({"site_name": "From cache"})

        data = await SiteSettingsService(db_session, fake_redis).get_settings()

        assert data.site_name == "From cache"

    async def test_corrupt_cache_falls_back_to_database(self, db_session: AsyncSession, fake_redis):
        db_session.add(SiteSettings(site_name="From DB"))
        await db_session.commit()
        fake_redis.store[SITE_SETTINGS_CACHE_KEY] = "{not json"

        data = await SiteSettingsService(db_session, fake_redis).get_settings()

        assert data.site_name == "From DB"

    async def test_redis_down_falls_back_to_database(self, db_session: AsyncSession, fake_redis):
        db_session.add(SiteSettings(site_name="From DB"))
        await db_session.commit()
        fake_redis.fail = True

        data = await SiteSettingsService(db_session, fake_redis).get_settings()

        assert data.site_name == "From DB"


class TestUpdateSettings:
    """Tests for SiteSettingsService.update_settings()."""

    async def test_creates_row_on_first_write(self, db_session: AsyncSession, fake_redis):
        service = SiteSettingsService(db_session, fake_redis)

        data = await service.update_settings(SiteSettingsUpdate(comments_enabled=False))
        await db_session.commit()

        assert data.comments_enabled is False
        assert data.site_name == SiteDefaults.SITE_NAME

    async def test_update_invalidates_cache(self, db_session: AsyncSession, fake_redis):
        service = SiteSettingsService(db_session, fake_redis)
        await service.get_settings()
        assert SITE_SETTINGS_CACHE_KEY in fake_redis.store

        await service.update_settings(SiteSettingsUpdate(site_name="Renamed"))
        await db_session.commit()

        assert SITE_SETTINGS_CACHE_KEY not in fake_redis.store
        assert (await service.get_settings()).site_name == "Renamed"

    async def test_update_requires_a_field(self):
        with pytest.raises(ValueError):
            SiteSettingsUpdate()


class TestSettingsCacheOnRedis:
    """SiteSettingsService against a real Redis server."""

    async def test_cache_written_with_ttl(self, db_session: AsyncSession, redis_client):
        db_session.add(SiteSettings(site_name="My Blog"))
        await db_session.commit()

        data = await SiteSettingsService(db_session, redis_client).get_settings()

        assert data.site_name == "My Blog"
        cached = await redis_client.get(SITE_SETTINGS_CACHE_KEY)
        assert json.loads(cached)["site_name"] == "My Blog"
        assert 0 < await redis_client.ttl(SITE_SETTINGS_CACHE_KEY) <= settings.CACHE_TTL

    async def test_cached_value_served_then_invalidated(self, db_session: AsyncSession, redis_client):
        service = SiteSettingsService(db_session, redis_client)
        await redis_client.set(SITE_SETTINGS_CACHE_KEY, json.dumps({"site_name": "From cache"}))

        assert (await service.get_settings()).site_name == "From cache"

        await service.update_settings(SiteSettingsUpdate(site_name="Renamed"))
        await db_session.commit()

        assert await redis_client.exists(SITE_SETTINGS_CACHE_KEY) == 0
        assert (await service.get_settings()).site_name == "Renamed"
