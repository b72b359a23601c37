"""
SQLModel-based Comment models with inheritance for security

The inheritance structure is:

CommentBase (shared public fields)
    ├─> Comments (database table, adds author contact and provenance fields)
    └─> CommentResponse/CommentAdminResponse (API schemas, defined in app/schemas)

Threading: ``parent_id`` is null for top-level comments. Replies may point at
any ancestor, and always share the ``post_id`` of their thread.
"""

from datetime import datetime

from sqlalchemy import ForeignKeyConstraint, Index, Text
from sqlmodel import Field, SQLModel

from app.models.post import utc_now


class CommentBase(SQLModel):
    """
    Base model with shared public fields for Comments.

    These fields are safe to expose on public read paths.
    """

    # Owning post, immutable after creation
    post_id: int

    # Threading: null for top-level, id of any ancestor comment for replies
    parent_id: int | None = Field(default=None)

    author_name: str = Field(max_length=100)
    author_website: str | None = Field(default=None, max_length=255)
    content: str = Field(sa_type=Text)

    # Moderation
    is_approved: bool = Field(default=False)

    # Denormalised descendant count, meaningful on top-level rows only
    reply_count: int = Field(default=0)


class Comments(CommentBase, table=True):
    """
    Database table for comments.

    Internal fields (admin read paths only):
    - author_email: contact address supplied at submission
    - author_ip, user_agent: captured server-side from the request
    """

    __tablename__ = "comments"

    # Deleting a post removes its comments; deleting a comment removes its
    # subtree. The service performs the subtree delete explicitly as well,
    # since SQLite does not enforce foreign keys by default.
    __table_args__ = (
        ForeignKeyConstraint(
            ["post_id"],
            ["posts.id"],
            ondelete="CASCADE",
            name="fk_comments_post_id",
        ),
        ForeignKeyConstraint(
            ["parent_id"],
            ["comments.id"],
            ondelete="CASCADE",
            name="fk_comments_parent_id",
        ),
        Index("comments_post_approved_idx", "post_id", "is_approved"),
        Index("comments_post_created_idx", "post_id", "created_at"),
        Index("comments_parent_idx", "parent_id"),
    )

    id: int | None = Field(default=None, primary_key=True)

    author_email: str = Field(max_length=255)

    # Provenance (privacy-sensitive)
    author_ip: str | None = Field(default=None, max_length=45)
    user_agent: str | None = Field(default=None, max_length=512)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
