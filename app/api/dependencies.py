"""
Common query parameter models and service providers for API endpoints.

The query models are used with FastAPI's Depends() to provide reusable
query parameter sets. The providers build per-request service objects from
the request's database session and Redis client.
"""

from typing import Annotated, Literal

import redis.asyncio as redis
from fastapi import Depends
from pydantic import BaseModel, Field, computed_field
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.database import get_db
from app.core.redis import get_redis
from app.services.comment_store import CommentStore
from app.services.site_settings import SiteSettingsService


class PaginationParams(BaseModel):
    """Common pagination query parameters."""

    page: int = Field(default=1, ge=1, description="Page number")
    limit: int = Field(
        default=settings.DEFAULT_PAGE_SIZE,
        ge=1,
        le=settings.MAX_PAGE_SIZE,
        description="Items per page",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def offset(self) -> int:
        """Calculate offset from page and limit."""
        return (self.page - 1) * self.limit


class CommentFilterParams(BaseModel):
    """Admin comment filters."""

    status: Literal["all", "approved", "pending"] = Field(
        default="all", description="Approval status filter"
    )
    post_id: int | None = Field(default=None, ge=1, description="Restrict to one post")


class CommentSearchParams(CommentFilterParams):
    """Admin comment filters plus keyword search."""

    keyword: str | None = Field(
        default=None,
        max_length=200,
        description="Search in content, author name and author email",
    )


def get_comment_store(db: Annotated[AsyncSession, Depends(get_db)]) -> CommentStore:
    return CommentStore(db)


def get_site_settings_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    redis_client: Annotated[redis.Redis, Depends(get_redis)],  # type: ignore[type-arg]
) -> SiteSettingsService:
    return SiteSettingsService(db, redis_client)


# Type aliases for dependency injection
CommentStoreDep = Annotated[CommentStore, Depends(get_comment_store)]
SiteSettingsDep = Annotated[SiteSettingsService, Depends(get_site_settings_service)]
