"""
Pydantic schemas for site settings.
"""

from typing import Any

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from app.models.site_setting import SiteSettingsBase


class SiteSettingsResponse(SiteSettingsBase):
    """Site settings as served to the front-end and cached in Redis."""

    model_config = {"from_attributes": True}


class SiteSettingsUpdate(BaseModel):
    """Partial update of site settings. At least one field must be provided."""

    site_name: str | None = Field(default=None, min_length=1, max_length=100)
    site_title: str | None = Field(default=None, min_length=1, max_length=200)
    site_description: str | None = Field(default=None, max_length=500)
    site_email: EmailStr | None = None
    site_url: str | None = Field(default=None, max_length=255)
    posts_per_page: int | None = Field(default=None, ge=1, le=100)
    introduction: str | None = None
    site_footer: str | None = Field(default=None, max_length=500)
    comments_enabled: bool | None = None

    @field_validator(
        "site_name", "site_title", "site_description", "site_url", "site_footer", mode="before"
    )
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    @model_validator(mode="after")
    def at_least_one_field(self) -> "SiteSettingsUpdate":
        values = self.model_dump(exclude_unset=True, exclude_none=True)
        if not values:
            raise ValueError("At least one field must be provided")
        return self
