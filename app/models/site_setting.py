"""
SQLModel-based site settings model.

A single row holds the site-wide configuration edited from the admin
back-office. ``comments_enabled`` gates both comment submission and public
comment display.
"""

from sqlalchemy import Text
from sqlmodel import Field, SQLModel

from app.config import SiteDefaults


class SiteSettingsBase(SQLModel):
    """Editable site settings."""

    site_name: str = Field(default=SiteDefaults.SITE_NAME, max_length=100)
    site_title: str = Field(default=SiteDefaults.SITE_TITLE, max_length=200)
    site_description: str = Field(default=SiteDefaults.SITE_DESCRIPTION, max_length=500)
    site_email: str = Field(default=SiteDefaults.SITE_EMAIL, max_length=255)
    site_url: str = Field(default=SiteDefaults.SITE_URL, max_length=255)
    posts_per_page: int = Field(default=SiteDefaults.POSTS_PER_PAGE)
    introduction: str = Field(default=SiteDefaults.INTRODUCTION, sa_type=Text)
    site_footer: str = Field(default=SiteDefaults.SITE_FOOTER, max_length=500)
    comments_enabled: bool = Field(default=SiteDefaults.COMMENTS_ENABLED)


class SiteSettings(SiteSettingsBase, table=True):
    """Database table for site settings (one row, id=1)."""

    __tablename__ = "site_settings"

    id: int | None = Field(default=None, primary_key=True)
