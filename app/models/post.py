"""
SQLModel-based Post model.

Posts are the owning content items that comments attach to. Only the fields
the comment subsystem reads are modelled here: existence, publication state
and the per-post ``allow_comments`` switch.
"""

from datetime import UTC, datetime

from sqlalchemy import Index, Text
from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    """Timestamp factory shared by all tables."""
    return datetime.now(UTC)


class PostBase(SQLModel):
    """Public post fields."""

    title: str = Field(max_length=255)
    slug: str = Field(max_length=255)
    is_published: bool = Field(default=False)

    # Per-post switch; the site-wide switch lives in site_settings
    allow_comments: bool = Field(default=True)


class Posts(PostBase, table=True):
    """Database table for posts."""

    __tablename__ = "posts"

    __table_args__ = (
        Index("posts_slug_idx", "slug", unique=True),
        Index("posts_published_idx", "is_published"),
    )

    id: int | None = Field(default=None, primary_key=True)
    content: str = Field(default="", sa_type=Text)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
