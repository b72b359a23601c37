"""
API v1 Router
"""

from fastapi import APIRouter

from app.api.v1 import admin_comments, auth, comments, settings

router = APIRouter()

# Include all endpoint routers
router.include_router(auth.router)
router.include_router(comments.router)
router.include_router(admin_comments.router)
router.include_router(settings.router)

__all__ = ["router"]
