"""
Public comment endpoints
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import CommentStoreDep, SiteSettingsDep
from app.core.auth import get_client_ip, get_user_agent
from app.core.database import get_db
from app.core.exceptions import NotFoundError, PermissionDeniedError
from app.models import Posts
from app.schemas.comment import CommentCreate, CommentResponse, CommentThreadResponse
from app.schemas.common import ApiResponse
from app.services.comment_tree import build_comment_tree
from app.services.moderation import public_visible
from app.services.reply_counter import find_root_id, refresh_after_write

router = APIRouter(prefix="/comments", tags=["comments"])


@router.post(
    "",
    response_model=ApiResponse[CommentResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_comment(
    comment_data: CommentCreate,
    request: Request,
    store: CommentStoreDep,
    site: SiteSettingsDep,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse[CommentResponse]:
    """
    Submit a comment or a reply.

    New comments are stored pending moderation and only appear publicly once
    an admin approves them. Use `author_website` (or `author_url`) for an
    optional homepage link.

    **Errors:**
    - 400: Invalid input, or the post does not accept comments
    - 403: Comments are disabled site-wide
    - 404: Post or parent comment not found
    """
    if not await site.comments_enabled():
        raise PermissionDeniedError("Comments are disabled")

    comment = await store.create_comment(
        comment_data,
        author_ip=get_client_ip(request),
        user_agent=get_user_agent(request),
    )
    await db.commit()
    response = ApiResponse[CommentResponse](
        data=CommentResponse.model_validate(comment),
        message="Comment submitted and awaiting moderation",
    )

    if comment.parent_id is not None:
        root_id = await find_root_id(db, comment)
        if root_id is not None:
            await refresh_after_write(db, root_id)

    return response


@router.get("/post/{post_id}", response_model=ApiResponse[list[CommentThreadResponse]])
async def list_post_comments(
    post_id: Annotated[int, Path(description="Post ID", ge=1)],
    store: CommentStoreDep,
    site: SiteSettingsDep,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse[list[CommentThreadResponse]]:
    """
    Approved comments of a post, as threads.

    Each top-level comment carries all of its approved descendants in
    `replies`, oldest first. Returns an empty list when comments are
    disabled site-wide.
    """
    if not await site.comments_enabled():
        return ApiResponse[list[CommentThreadResponse]](data=[])

    post = await db.get(Posts, post_id)
    if post is None:
        raise NotFoundError("Post not found")

    comments = await store.list_by_post(post_id)
    threads = build_comment_tree(public_visible(comments), orphans="drop")
    return ApiResponse[list[CommentThreadResponse]](data=threads)
