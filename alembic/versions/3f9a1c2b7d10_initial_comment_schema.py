"""initial comment schema

Revision ID: 3f9a1c2b7d10
Revises:
Create Date: 2026-10-19 10:12:41.204518

"""
from typing import Sequence

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9a1c2b7d10'
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "posts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("slug", sa.String(255), nullable=False),
        sa.Column("is_published", sa.Boolean(), nullable=False),
        sa.Column("allow_comments", sa.Boolean(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("posts_slug_idx", "posts", ["slug"], unique=True)
    op.create_index("posts_published_idx", "posts", ["is_published"])

    # Replies cascade with their parent; comments cascade with their post
    op.create_table(
        "comments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("post_id", sa.Integer(), nullable=False),
        sa.Column("parent_id", sa.Integer(), nullable=True),
        sa.Column("author_name", sa.String(100), nullable=False),
        sa.Column("author_email", sa.String(255), nullable=False),
        sa.Column("author_website", sa.String(255), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("is_approved", sa.Boolean(), nullable=False),
        sa.Column("reply_count", sa.Integer(), nullable=False),
        sa.Column("author_ip", sa.String(45), nullable=True),
        sa.Column("user_agent", sa.String(512), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["post_id"],
            ["posts.id"],
            name="fk_comments_post_id",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["parent_id"],
            ["comments.id"],
            name="fk_comments_parent_id",
            ondelete="CASCADE",
        ),
    )
    op.create_index("comments_post_approved_idx", "comments", ["post_id", "is_approved"])
    op.create_index("comments_post_created_idx", "comments", ["post_id", "created_at"])
    op.create_index("comments_parent_idx", "comments", ["parent_id"])

    op.create_table(
        "site_settings",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("site_name", sa.String(100), nullable=False),
        sa.Column("site_title", sa.String(200), nullable=False),
        sa.Column("site_description", sa.String(500), nullable=False),
        sa.Column("site_email", sa.String(255), nullable=False),
        sa.Column("site_url", sa.String(255), nullable=False),
        sa.Column("posts_per_page", sa.Integer(), nullable=False),
        sa.Column("introduction", sa.Text(), nullable=False),
        sa.Column("site_footer", sa.String(500), nullable=False),
        sa.Column("comments_enabled", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "admins",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("display_name", sa.String(100), nullable=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("last_login", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("admins_username_idx", "admins", ["username"], unique=True)
    op.create_index("admins_email_idx", "admins", ["email"], unique=True)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("admins_email_idx", table_name="admins")
    op.drop_index("admins_username_idx", table_name="admins")
    op.drop_table("admins")

    op.drop_table("site_settings")

    op.drop_index("comments_parent_idx", table_name="comments")
    op.drop_index("comments_post_created_idx", table_name="comments")
    op.drop_index("comments_post_approved_idx", table_name="comments")
    op.drop_table("comments")

    op.drop_index("posts_published_idx", table_name="posts")
    op.drop_index("posts_slug_idx", table_name="posts")
    op.drop_table("posts")
