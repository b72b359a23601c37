"""
Pydantic schemas for API responses and requests
"""
from app.models.comment import CommentBase  # Re-export from models
from app.schemas.auth import LoginRequest, TokenResponse
from app.schemas.comment import (
    CommentAdminResponse,
    CommentAdminThreadResponse,
    CommentApprovalUpdate,
    CommentBulkDelete,
    CommentCreate,
    CommentRepliesResponse,
    CommentReplyCreate,
    CommentResponse,
    CommentStats,
    CommentStatsResponse,
    CommentThreadResponse,
    CommentUpdate,
    ReplyCountRefreshResult,
)
from app.schemas.common import AffectedRows, ApiResponse, ErrorDetail, Pagination
from app.schemas.site_setting import SiteSettingsResponse, SiteSettingsUpdate

__all__ = [
    # Envelope
    "AffectedRows",
    "ApiResponse",
    "ErrorDetail",
    "Pagination",
    # Auth schemas
    "LoginRequest",
    "TokenResponse",
    # Comment schemas
    "CommentBase",
    "CommentAdminResponse",
    "CommentAdminThreadResponse",
    "CommentApprovalUpdate",
    "CommentBulkDelete",
    "CommentCreate",
    "CommentRepliesResponse",
    "CommentReplyCreate",
    "CommentResponse",
    "CommentStats",
    "CommentStatsResponse",
    "CommentThreadResponse",
    "CommentUpdate",
    "ReplyCountRefreshResult",
    # Site settings schemas
    "SiteSettingsResponse",
    "SiteSettingsUpdate",
]
