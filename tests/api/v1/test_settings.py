"""
Tests for site settings endpoints.

These tests cover the /api/v1/admin/settings endpoints and the effect of
the comments_enabled switch on the public comment routes.
"""

import json

import pytest
from httpx import AsyncClient

from app.config import SiteDefaults
from app.services.site_settings import SITE_SETTINGS_CACHE_KEY


@pytest.mark.api
class TestGetSettings:
    """Tests for GET /api/v1/admin/settings endpoint."""

    async def test_requires_admin(self, client: AsyncClient):
        response = await client.get("/api/v1/admin/settings")

        assert response.status_code == 401

    async def test_defaults_when_unsaved(self, client: AsyncClient, admin_headers, fake_redis):
        response = await client.get("/api/v1/admin/settings", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["site_name"] == SiteDefaults.SITE_NAME
        assert data["comments_enabled"] is True
        assert data["posts_per_page"] == SiteDefaults.POSTS_PER_PAGE

    async def test_served_from_cache(self, client: AsyncClient, admin_headers, fake_redis):
        await client.get("/api/v1/admin/settings", headers=admin_headers)
        cached = json.loads(fake_redis.store[SITE_SETTINGS_CACHE_KEY])
        cached["site_name"] = "From Cache"
        fake_redis.store[SITE_SETTINGS_CACHE_KEY] = json.dumps(cached)

        response = await client.get("/api/v1/admin/settings", headers=admin_headers)

        assert response.json()["data"]["site_name"] == "From Cache"

    async def test_redis_down_falls_back_to_db(self, client: AsyncClient, admin_headers, fake_redis):
        fake_redis.fail = True

        response = await client.get("/api/v1/admin/settings", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["data"]["site_name"] == SiteDefaults.SITE_NAME


@pytest.mark.api
class TestUpdateSettings:
    """Tests for PUT /api/v1/admin/settings endpoint."""

    async def test_partial_update(self, client: AsyncClient, admin_headers):
        response = await client.put(
            "/api/v1/admin/settings",
            json={"site_name": "  My Blog  ", "posts_per_page": 5},
            headers=admin_headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["site_name"] == "My Blog"
        assert data["posts_per_page"] == 5
        assert data["site_title"] == SiteDefaults.SITE_TITLE

        again = await client.get("/api/v1/admin/settings", headers=admin_headers)
        assert again.json()["data"]["site_name"] == "My Blog"

    async def test_update_invalidates_cache(self, client: AsyncClient, admin_headers, fake_redis):
        await client.get("/api/v1/admin/settings", headers=admin_headers)
        assert SITE_SETTINGS_CACHE_KEY in fake_redis.store

        await client.put("/api/v1/admin/settings", json={"site_title": "New"}, headers=admin_headers)

        assert SITE_SETTINGS_CACHE_KEY not in fake_redis.store

    async def test_empty_update_rejected(self, client: AsyncClient, admin_headers):
        response = await client.put("/api/v1/admin/settings", json={}, headers=admin_headers)

        assert response.status_code == 400

    @pytest.mark.parametrize(
        "payload",
        [{"site_email": "nope"}, {"posts_per_page": 0}, {"posts_per_page": 101}, {"site_name": ""}],
    )
    async def test_invalid_values(self, client: AsyncClient, admin_headers, payload):
        response = await client.put("/api/v1/admin/settings", json=payload, headers=admin_headers)

        assert response.status_code == 400


@pytest.mark.api
class TestCommentsSwitch:
    """Turning comments off hides and blocks them; turning them on restores them."""

    async def test_toggle(self, client: AsyncClient, admin_headers, test_post, make_comment, sample_comment_data):
        post_id = test_post.id
        await make_comment(post_id=post_id, is_approved=True)

        await client.put("/api/v1/admin/settings", json={"comments_enabled": False}, headers=admin_headers)

        listed = await client.get(f"/api/v1/comments/post/{post_id}")
        assert listed.json()["data"] == []
        submitted = await client.post("/api/v1/comments", json={**sample_comment_data, "post_id": post_id})
        assert submitted.status_code == 403

        await client.put("/api/v1/admin/settings", json={"comments_enabled": True}, headers=admin_headers)

        listed = await client.get(f"/api/v1/comments/post/{post_id}")
        assert len(listed.json()["data"]) == 1
