"""
Pydantic schemas for Comment endpoints.

Input schemas do all field validation at the boundary: text fields are
trimmed first, then length and email-shape checks run on the trimmed value.
"""

import re
from collections.abc import Sequence
from typing import Any, Self

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator

from app.config import settings
from app.models.comment import CommentBase
from app.schemas.common import UTCDatetime

# Something@domain.tld, no whitespace
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _strip(v: Any) -> Any:
    if isinstance(v, str):
        return v.strip()
    return v


def _check_email(v: str) -> str:
    if not EMAIL_PATTERN.match(v):
        raise ValueError("Please enter a valid email address")
    return v


def _blank_to_none(v: Any) -> Any:
    v = _strip(v)
    if v == "":
        return None
    return v


class CommentCreate(BaseModel):
    """Schema for a public comment submission"""

    post_id: int = Field(gt=0, description="ID of the post to comment on")
    author_name: str = Field(min_length=1, max_length=100)
    author_email: str = Field(min_length=3, max_length=255)
    author_website: str | None = Field(
        default=None,
        max_length=255,
        validation_alias=AliasChoices("author_website", "author_url"),
    )
    content: str = Field(min_length=1, max_length=settings.COMMENT_MAX_LENGTH)
    parent_id: int | None = Field(
        default=None,
        gt=0,
        description="Parent comment ID for replies (null = top-level comment)",
    )

    @field_validator("author_name", "author_email", "content", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return _strip(v)

    @field_validator("author_website", mode="before")
    @classmethod
    def normalize_website(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("author_email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _check_email(v)


class CommentReplyCreate(BaseModel):
    """Schema for an admin reply. Replies are approved unless told otherwise."""

    author_name: str = Field(min_length=1, max_length=100)
    author_email: str = Field(min_length=3, max_length=255)
    author_website: str | None = Field(default=None, max_length=255)
    content: str = Field(min_length=1, max_length=settings.COMMENT_MAX_LENGTH)
    is_approved: bool = True

    @field_validator("author_name", "author_email", "content", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return _strip(v)

    @field_validator("author_website", mode="before")
    @classmethod
    def normalize_website(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("author_email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _check_email(v)


class CommentUpdate(BaseModel):
    """Schema for an admin edit. At least one field must be provided."""

    author_name: str | None = Field(default=None, min_length=1, max_length=100)
    author_email: str | None = Field(default=None, min_length=3, max_length=255)
    author_website: str | None = Field(default=None, max_length=255)
    content: str | None = Field(default=None, min_length=1, max_length=settings.COMMENT_MAX_LENGTH)
    is_approved: bool | None = Field(default=None, description="Only pending -> approved is allowed")

    @field_validator("author_name", "author_email", "content", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return _strip(v)

    @field_validator("author_website", mode="before")
    @classmethod
    def normalize_website(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("author_email")
    @classmethod
    def validate_email(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return _check_email(v)

    @model_validator(mode="after")
    def at_least_one_field(self) -> "CommentUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided")
        for name in ("author_name", "author_email", "content"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class CommentApprovalUpdate(BaseModel):
    """Bulk approval request"""

    ids: list[int] = Field(min_length=1, description="Comment IDs to update")
    is_approved: bool


class CommentBulkDelete(BaseModel):
    """Bulk delete request"""

    ids: list[int] = Field(min_length=1, description="Comment IDs to delete")


class CommentResponse(CommentBase):
    """
    Schema for comments on public read paths.

    Inherits public fields from CommentBase. Does NOT include the author's
    email, IP address or user agent.
    """

    id: int
    created_at: UTCDatetime
    updated_at: UTCDatetime

    model_config = {"from_attributes": True}


class CommentAdminResponse(CommentResponse):
    """Schema for comments on admin read paths, including internal fields."""

    author_email: str
    author_ip: str | None = None
    user_agent: str | None = None


class CommentThreadResponse(CommentResponse):
    """A top-level comment with every descendant flattened into ``replies``."""

    replies: list[CommentResponse] = Field(default_factory=list)

    @classmethod
    def from_models(cls, root: Any, replies: Sequence[Any]) -> Self:
        """Build a thread from ORM rows (or anything with the same attributes)."""
        thread = cls.model_validate(root)
        thread.replies = [CommentResponse.model_validate(reply) for reply in replies]
        return thread


class CommentAdminThreadResponse(CommentAdminResponse):
    """Admin variant of CommentThreadResponse."""

    replies: list[CommentAdminResponse] = Field(default_factory=list)

    @classmethod
    def from_models(cls, root: Any, replies: Sequence[Any]) -> Self:
        thread = cls.model_validate(root)
        thread.replies = [CommentAdminResponse.model_validate(reply) for reply in replies]
        return thread


class CommentRepliesResponse(BaseModel):
    """A comment together with its direct replies"""

    comment: CommentAdminResponse
    replies: list[CommentAdminResponse]
    total: int


class CommentStats(BaseModel):
    """Aggregate moderation counts"""

    total: int
    approved: int
    pending: int


class CommentStatsResponse(BaseModel):
    """Schema for the admin dashboard widget"""

    stats: CommentStats
    recent_comments: list[CommentAdminResponse]


class ReplyCountRefreshResult(BaseModel):
    """Outcome of a bulk reply-count repair"""

    total_comments: int
    updated_count: int
    errors: list[str] = Field(default_factory=list)
