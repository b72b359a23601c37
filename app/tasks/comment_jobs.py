"""Reply-count repair jobs for arq worker."""

from typing import Any

from arq import Retry
from sqlalchemy.exc import SQLAlchemyError

from app.core.database import session_scope
from app.core.exceptions import NotFoundError, ValidationError
from app.core.logging import bind_job, get_logger
from app.services.reply_counter import refresh_all_reply_counts, refresh_reply_count

logger = get_logger(__name__)


async def refresh_reply_counts_job(ctx: dict[str, Any]) -> dict[str, Any]:
    """
    Periodic repair of every top-level comment's reply count.

    Per-comment failures are collected rather than retried; the next run
    picks them up again.

    Args:
        ctx: ARQ context dict

    Returns:
        dict with total_comments, updated_count and errors
    """
    bind_job(task="reply_count_refresh_all")

    async with session_scope() as db:
        result = await refresh_all_reply_counts(db)

    if result.errors:
        logger.warning(
            "reply_count_refresh_partial",
            updated_count=result.updated_count,
            failed=len(result.errors),
        )
    return result.model_dump()


async def refresh_thread_reply_count_job(
    ctx: dict[str, Any],
    comment_id: int,
) -> dict[str, Any]:
    """
    Refresh one top-level comment's reply count.

    Queued when the in-request refresh fails.

    Args:
        ctx: ARQ context dict
        comment_id: Top-level comment ID

    Returns:
        dict with success status and the new count

    Raises:
        Retry: If the database operation fails
    """
    bind_job(task="reply_count_refresh", comment_id=comment_id)

    try:
        async with session_scope() as db:
            count = await refresh_reply_count(db, comment_id)
            await db.commit()
    except (NotFoundError, ValidationError) as e:
        # Thread deleted, or no longer top-level: nothing to repair
        logger.info("reply_count_refresh_skipped", comment_id=comment_id, reason=e.message)
        return {"success": False, "reason": e.message}
    except SQLAlchemyError as e:
        logger.error(
            "reply_count_refresh_failed",
            comment_id=comment_id,
            error=str(e),
            error_type=type(e).__name__,
        )
        # Retry with backoff
        raise Retry(defer=ctx["job_try"] * 5) from e

    logger.info("reply_count_refresh_completed", comment_id=comment_id, reply_count=count)
    return {"success": True, "reply_count": count}
