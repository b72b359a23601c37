"""
Authentication dependencies for FastAPI route protection.

This module provides dependency functions for:
- Extracting and verifying admin JWT tokens (bearer header or cookie)
- Loading the current admin from the database
- Reading request provenance (client IP, user agent) for new comments
"""

from typing import Annotated

from fastapi import Cookie, Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.logging import bind_admin
from app.core.security import read_admin_token
from app.models.admin import Admins


async def get_current_admin_id(
    access_token: Annotated[str | None, Cookie()] = None,
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(HTTPBearer(auto_error=False))
    ] = None,
) -> int:
    """
    Extract and verify the admin JWT.

    The Authorization header wins over the access_token cookie when both
    are present.

    Raises:
        HTTPException: 401 if token is missing, invalid, or expired
    """
    token = credentials.credentials if credentials else access_token
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    admin_id = read_admin_token(token)
    if admin_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return admin_id


async def get_current_admin(
    admin_id: Annotated[int, Depends(get_current_admin_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Admins:
    """
    Load the current admin using the verified token.

    Raises:
        HTTPException: 401 if the admin no longer exists or is inactive
    """
    result = await db.execute(select(Admins).where(Admins.id == admin_id))  # type: ignore[arg-type]
    admin = result.scalar_one_or_none()

    if admin is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Admin not found",
        )

    if not admin.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Admin account is inactive",
        )

    bind_admin(admin_id)
    return admin


def get_client_ip(request: Request) -> str:
    """
    Extract client IP address from request.

    Checks X-Forwarded-For first (first hop is the client), then X-Real-IP,
    then the socket peer.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()
    return request.client.host if request.client else "unknown"


def get_user_agent(request: Request) -> str:
    """User-Agent header, truncated to the column width."""
    return request.headers.get("User-Agent", "unknown")[:512]


# Type aliases for dependency injection
AdminUser = Annotated[Admins, Depends(get_current_admin)]
