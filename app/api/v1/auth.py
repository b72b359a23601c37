"""
Authentication API endpoints.

This module provides endpoints for:
- Admin login (JWT, returned in the body and as an HTTPOnly cookie)
- Logout (clears the cookie)
- Current admin profile
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.auth import AdminUser, get_client_ip
from app.core.database import get_db
from app.core.exceptions import AuthenticationError
from app.core.logging import get_logger
from app.core.security import check_password, issue_admin_token
from app.models.admin import AdminBase, Admins
from app.models.post import utc_now
from app.schemas.auth import LoginRequest, TokenResponse
from app.schemas.common import ApiResponse

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _set_access_cookie(response: Response, access_token: str) -> None:
    response.set_cookie(
        key="access_token",
        value=access_token,
        httponly=True,  # Prevent JavaScript access (XSS protection)
        secure=settings.ENVIRONMENT == "production",  # HTTPS only in production
        samesite="strict",  # CSRF protection
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,  # Match JWT expiration
    )


@router.post("/login", response_model=ApiResponse[TokenResponse])
async def login(
    credentials: LoginRequest,
    request: Request,
    response: Response,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse[TokenResponse]:
    """
    Authenticate an admin and issue an access token.

    The token is returned in the body for bearer use and set as the
    `access_token` cookie for the browser back-office.
    """
    result = await db.execute(
        select(Admins).where(Admins.username == credentials.username)  # type: ignore[arg-type]
    )
    admin = result.scalar_one_or_none()

    # Same message for unknown user and bad password
    if admin is None or not check_password(credentials.password, admin.password_hash):
        logger.warning(
            "login_failed",
            username=credentials.username,
            ip_address=get_client_ip(request),
        )
        raise AuthenticationError("Invalid username or password")

    if not admin.is_active:
        logger.warning("login_inactive_admin", admin_id=admin.id)
        raise AuthenticationError("Admin account is inactive")

    assert admin.id is not None
    admin.last_login = utc_now()
    db.add(admin)
    await db.commit()

    access_token = issue_admin_token(admin.id)
    _set_access_cookie(response, access_token)

    logger.info("login_succeeded", admin_id=admin.id, ip_address=get_client_ip(request))

    return ApiResponse[TokenResponse](
        data=TokenResponse(
            access_token=access_token,
            expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        )
    )


@router.post("/logout", response_model=ApiResponse[None])
async def logout(response: Response) -> ApiResponse[None]:
    """Clear the access token cookie. Bearer tokens simply expire."""
    # Match set_cookie params
    response.delete_cookie(
        key="access_token",
        path="/",
        httponly=True,
        secure=settings.ENVIRONMENT == "production",
        samesite="strict",
    )
    return ApiResponse[None](message="Logged out")


@router.get("/me", response_model=ApiResponse[AdminBase])
async def get_me(admin: AdminUser) -> ApiResponse[AdminBase]:
    """Profile of the authenticated admin."""
    return ApiResponse[AdminBase](
        data=AdminBase(username=admin.username, email=admin.email, display_name=admin.display_name)
    )
