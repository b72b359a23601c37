"""
Authentication schemas for request/response validation.

Only admins authenticate; readers comment anonymously.
"""

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Request schema for admin login."""

    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=1, max_length=255)


class TokenResponse(BaseModel):
    """Response schema for successful authentication."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Access token expiration time in seconds from now")
