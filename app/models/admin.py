"""
SQLModel-based Admin model.

Admins are the only authenticated principals; public visitors comment
anonymously with a name and email.
"""

from datetime import datetime

from sqlalchemy import Index
from sqlmodel import Field, SQLModel

from app.models.post import utc_now


class AdminBase(SQLModel):
    """Public admin fields."""

    username: str = Field(max_length=50)
    email: str = Field(max_length=255)
    display_name: str | None = Field(default=None, max_length=100)


class Admins(AdminBase, table=True):
    """
    Database table for admins.

    Internal fields:
    - password_hash: bcrypt hash, never serialised
    - is_active: inactive admins cannot authenticate
    """

    __tablename__ = "admins"

    __table_args__ = (
        Index("admins_username_idx", "username", unique=True),
        Index("admins_email_idx", "email", unique=True),
    )

    id: int | None = Field(default=None, primary_key=True)
    password_hash: str = Field(max_length=255)
    is_active: bool = Field(default=True)
    last_login: datetime | None = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
