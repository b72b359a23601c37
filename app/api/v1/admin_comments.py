"""
Admin comment moderation endpoints.

All routes require an active admin (bearer token or access_token cookie).
Admin views bypass the moderation gate and can filter by status.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import (
    CommentFilterParams,
    CommentSearchParams,
    CommentStoreDep,
    PaginationParams,
)
from app.config import settings
from app.core.auth import AdminUser, get_client_ip, get_user_agent
from app.core.database import get_db
from app.core.logging import get_logger
from app.schemas.comment import (
    CommentAdminResponse,
    CommentAdminThreadResponse,
    CommentApprovalUpdate,
    CommentBulkDelete,
    CommentRepliesResponse,
    CommentReplyCreate,
    CommentStats,
    CommentStatsResponse,
    CommentUpdate,
    ReplyCountRefreshResult,
)
from app.schemas.common import AffectedRows, ApiResponse, Pagination
from app.services.comment_store import CommentStore
from app.services.comment_tree import build_comment_tree
from app.services.moderation import filter_threads
from app.services.reply_counter import (
    find_root_id,
    refresh_after_write,
    refresh_all_reply_counts,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/admin/comments", tags=["admin"])

CommentId = Annotated[int, Path(description="Comment ID", ge=1)]


async def _thread_roots(db: AsyncSession, store: CommentStore, comment_ids: list[int]) -> set[int]:
    """Top-level ancestors of the given replies, resolved before they change."""
    roots: set[int] = set()
    for comment in await store.find_by_ids(comment_ids):
        if comment.parent_id is None:
            continue
        root_id = await find_root_id(db, comment)
        if root_id is not None:
            roots.add(root_id)
    return roots


@router.get("", response_model=ApiResponse[list[CommentAdminResponse]])
async def list_comments(
    _admin: AdminUser,
    pagination: Annotated[PaginationParams, Depends()],
    filters: Annotated[CommentSearchParams, Depends()],
    store: CommentStoreDep,
) -> ApiResponse[list[CommentAdminResponse]]:
    """
    Flat list of comments at any depth, newest first.

    **Filters:**
    - `status`: all (default), approved or pending
    - `post_id`: one post only
    - `keyword`: substring of content, author name or author email
    """
    comments, total = await store.list_all(
        page=pagination.page,
        per_page=pagination.limit,
        status=filters.status,
        post_id=filters.post_id,
        keyword=filters.keyword,
    )
    return ApiResponse[list[CommentAdminResponse]](
        data=[CommentAdminResponse.model_validate(c) for c in comments],
        pagination=Pagination(page=pagination.page, limit=pagination.limit, total=total),
    )


@router.get("/tree", response_model=ApiResponse[list[CommentAdminThreadResponse]])
async def list_comment_tree(
    _admin: AdminUser,
    pagination: Annotated[PaginationParams, Depends()],
    filters: Annotated[CommentFilterParams, Depends()],
    store: CommentStoreDep,
) -> ApiResponse[list[CommentAdminThreadResponse]]:
    """
    Comments as threads.

    Top-level comments are paginated newest first; each page carries the
    full set of descendants. The status filter applies to roots and replies
    individually: a thread is listed, and counted, if its root or any reply
    matches.
    """
    roots, total = await store.list_top_level(
        page=pagination.page,
        per_page=pagination.limit,
        post_id=filters.post_id,
        status=filters.status,
    )
    root_order = {root.id: index for index, root in enumerate(roots)}

    rows = await store.list_thread([root.id for root in roots if root.id is not None])
    threads = build_comment_tree(rows, orphans="promote", thread_model=CommentAdminThreadResponse)
    threads.sort(key=lambda t: root_order.get(t.id, len(root_order)))

    return ApiResponse[list[CommentAdminThreadResponse]](
        data=filter_threads(threads, filters.status),
        pagination=Pagination(page=pagination.page, limit=pagination.limit, total=total),
    )


@router.get("/stats", response_model=ApiResponse[CommentStatsResponse])
async def get_comment_stats(
    _admin: AdminUser,
    store: CommentStoreDep,
) -> ApiResponse[CommentStatsResponse]:
    """Total/approved/pending counts plus the most recent comments."""
    stats = await store.stats()
    recent = await store.recent(settings.RECENT_COMMENTS_LIMIT)
    return ApiResponse[CommentStatsResponse](
        data=CommentStatsResponse(
            stats=CommentStats(**stats),
            recent_comments=[CommentAdminResponse.model_validate(c) for c in recent],
        )
    )


@router.post("/refresh-counts", response_model=ApiResponse[ReplyCountRefreshResult])
async def refresh_reply_counts(
    admin: AdminUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse[ReplyCountRefreshResult]:
    """
    Recompute the reply count of every top-level comment.

    Failures on individual comments are reported in `errors`; the rest of
    the batch still runs.
    """
    logger.info("reply_count_refresh_requested", admin_id=admin.id)
    result = await refresh_all_reply_counts(db)
    return ApiResponse[ReplyCountRefreshResult](
        data=result,
        message=f"Refreshed {result.updated_count} of {result.total_comments} comments",
    )


@router.put("", response_model=ApiResponse[AffectedRows])
async def update_comments_approval(
    _admin: AdminUser,
    approval: CommentApprovalUpdate,
    store: CommentStoreDep,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse[AffectedRows]:
    """
    Bulk approval.

    Only pending -> approved is allowed. The whole request is rejected with
    400 if any listed comment is approved and `is_approved` is false.
    """
    affected = await store.set_approval_many(approval.ids, approval.is_approved)
    await db.commit()
    return ApiResponse[AffectedRows](
        data=AffectedRows(affected=affected),
        message=f"Updated {affected} comments",
    )


@router.delete("", response_model=ApiResponse[AffectedRows])
async def delete_comments(
    _admin: AdminUser,
    bulk: CommentBulkDelete,
    store: CommentStoreDep,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse[AffectedRows]:
    """Bulk delete. Each listed comment is removed together with its replies."""
    roots = await _thread_roots(db, store, bulk.ids) - set(bulk.ids)

    deleted = await store.delete_many(bulk.ids)
    await db.commit()

    for root_id in sorted(roots):
        await refresh_after_write(db, root_id)

    return ApiResponse[AffectedRows](
        data=AffectedRows(affected=deleted),
        message=f"Deleted {deleted} comments",
    )


@router.get("/{comment_id}", response_model=ApiResponse[CommentAdminResponse])
async def get_comment(
    _admin: AdminUser,
    comment_id: CommentId,
    store: CommentStoreDep,
) -> ApiResponse[CommentAdminResponse]:
    comment = await store.get(comment_id)
    return ApiResponse[CommentAdminResponse](data=CommentAdminResponse.model_validate(comment))


@router.put("/{comment_id}", response_model=ApiResponse[CommentAdminResponse])
async def update_comment(
    _admin: AdminUser,
    comment_id: CommentId,
    comment_data: CommentUpdate,
    store: CommentStoreDep,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse[CommentAdminResponse]:
    """
    Edit a comment's author fields or content, or approve it.

    Setting `is_approved` to false on an approved comment is rejected;
    delete the comment instead.
    """
    if comment_data.model_fields_set == {"is_approved"} and comment_data.is_approved is not None:
        comment = await store.set_approval(comment_id, comment_data.is_approved)
    else:
        comment = await store.update(comment_id, comment_data)
    await db.commit()
    return ApiResponse[CommentAdminResponse](data=CommentAdminResponse.model_validate(comment))


@router.delete("/{comment_id}", response_model=ApiResponse[AffectedRows])
async def delete_comment(
    _admin: AdminUser,
    comment_id: CommentId,
    store: CommentStoreDep,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse[AffectedRows]:
    """Delete a comment and all of its replies."""
    roots = await _thread_roots(db, store, [comment_id])

    deleted = await store.delete(comment_id)
    await db.commit()

    for root_id in sorted(roots):
        await refresh_after_write(db, root_id)

    return ApiResponse[AffectedRows](
        data=AffectedRows(affected=deleted),
        message=f"Deleted {deleted} comments",
    )


@router.post(
    "/{comment_id}/reply",
    response_model=ApiResponse[CommentAdminResponse],
    status_code=status.HTTP_201_CREATED,
)
async def reply_to_comment(
    _admin: AdminUser,
    comment_id: CommentId,
    reply_data: CommentReplyCreate,
    request: Request,
    store: CommentStoreDep,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse[CommentAdminResponse]:
    """Reply as the site. The reply is approved unless `is_approved` is false."""
    reply = await store.create_reply(
        comment_id,
        reply_data,
        author_ip=get_client_ip(request),
        user_agent=get_user_agent(request),
    )
    await db.commit()
    response = ApiResponse[CommentAdminResponse](
        data=CommentAdminResponse.model_validate(reply),
        message="Reply created",
    )

    root_id = await find_root_id(db, reply)
    if root_id is not None:
        await refresh_after_write(db, root_id)

    return response


@router.get("/{comment_id}/replies", response_model=ApiResponse[CommentRepliesResponse])
async def list_comment_replies(
    _admin: AdminUser,
    comment_id: CommentId,
    store: CommentStoreDep,
) -> ApiResponse[CommentRepliesResponse]:
    """A comment and its direct replies, oldest first."""
    comment = await store.get(comment_id)
    replies = await store.list_replies(comment_id)
    return ApiResponse[CommentRepliesResponse](
        data=CommentRepliesResponse(
            comment=CommentAdminResponse.model_validate(comment),
            replies=[CommentAdminResponse.model_validate(r) for r in replies],
            total=len(replies),
        )
    )
