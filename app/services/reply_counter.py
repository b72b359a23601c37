"""
Reply count maintenance.

``Comments.reply_count`` on a top-level comment caches the number of its
descendants at any depth. The cache is refreshed:
- in-request, right after a reply is created or deleted
- on demand from the admin refresh endpoint
- on a schedule by the arq worker (refresh_reply_counts_job)
- manually with scripts/refresh_reply_counts.py

A refresh is read-then-write without locking, so a reply landing between
the two steps leaves the count stale until the next refresh.
"""

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import AppError, NotFoundError, ValidationError
from app.core.logging import get_logger
from app.models.comment import Comments
from app.schemas.comment import ReplyCountRefreshResult
from app.services.comment_store import CommentStore
from app.services.comment_tree import collect_subtree
from app.tasks.queue import enqueue_reply_count_refresh

logger = get_logger(__name__)


async def count_descendants(db: AsyncSession, comment_id: int) -> int:
    """
    Count every descendant of a comment, at any depth.

    Raises:
        NotFoundError: Unknown comment
    """
    comment = await db.get(Comments, comment_id)
    if comment is None:
        raise NotFoundError("Comment not found")

    result = await db.execute(
        select(Comments.id, Comments.parent_id).where(
            Comments.post_id == comment.post_id  # type: ignore[arg-type]
        )
    )
    edges = [(row[0], row[1]) for row in result.all()]
    return len(collect_subtree(edges, [comment_id])) - 1


async def refresh_reply_count(db: AsyncSession, comment_id: int) -> int:
    """
    Recompute and store the reply count of a top-level comment.

    Flushes but does not commit.

    Returns:
        The new count

    Raises:
        NotFoundError: Unknown comment
        ValidationError: The comment is a reply
    """
    comment = await db.get(Comments, comment_id)
    if comment is None:
        raise NotFoundError("Comment not found")
    if comment.parent_id is not None:
        raise ValidationError("Reply counts are only kept on top-level comments")

    count = await count_descendants(db, comment_id)
    if comment.reply_count != count:
        comment.reply_count = count
        db.add(comment)
        await db.flush()

    logger.debug("reply_count_refreshed", comment_id=comment_id, reply_count=count)
    return count


async def find_root_id(db: AsyncSession, comment: Comments) -> int | None:
    """
    Resolve the top-level ancestor of a comment.

    Returns:
        The ancestor id, or None when the chain is broken or loops
    """
    seen: set[int] = set()
    current: Comments | None = comment
    while current is not None and current.parent_id is not None:
        if current.id in seen:
            return None
        seen.add(current.id)  # type: ignore[arg-type]
        current = await db.get(Comments, current.parent_id)
    return current.id if current is not None else None


async def refresh_thread_reply_count(db: AsyncSession, comment: Comments) -> int | None:
    """Refresh the count of the thread a comment belongs to."""
    root_id = await find_root_id(db, comment)
    if root_id is None:
        logger.warning("reply_count_root_missing", comment_id=comment.id)
        return None
    return await refresh_reply_count(db, root_id)


async def refresh_after_write(db: AsyncSession, root_id: int) -> None:
    """
    Best-effort refresh used right after a committed reply write.

    The write itself has already been committed, so a failure here only
    leaves the count stale: it is logged and handed to the arq worker. The
    periodic job catches anything the worker misses.
    """
    try:
        await refresh_reply_count(db, root_id)
        await db.commit()
    except (AppError, SQLAlchemyError) as e:
        await db.rollback()
        logger.warning("reply_count_refresh_failed", comment_id=root_id, error=str(e))
        await enqueue_reply_count_refresh(root_id)


async def refresh_all_reply_counts(db: AsyncSession) -> ReplyCountRefreshResult:
    """
    Recompute the reply count of every top-level comment.

    Each comment is refreshed and committed on its own. A failure is rolled
    back and recorded, and the batch moves on to the next comment.

    Returns:
        ReplyCountRefreshResult with the number of top-level comments seen,
        how many were refreshed and one message per failure
    """
    comment_ids = await CommentStore(db).list_top_level_ids()
    updated_count = 0
    errors: list[str] = []

    for comment_id in comment_ids:
        try:
            await refresh_reply_count(db, comment_id)
            await db.commit()
            updated_count += 1
        except Exception as e:
            await db.rollback()
            errors.append(f"Comment {comment_id}: {e}")
            logger.error("reply_count_refresh_failed", comment_id=comment_id, error=str(e))

    logger.info(
        "reply_counts_refreshed",
        total_comments=len(comment_ids),
        updated_count=updated_count,
        errors=len(errors),
    )
    return ReplyCountRefreshResult(
        total_comments=len(comment_ids),
        updated_count=updated_count,
        errors=errors,
    )
