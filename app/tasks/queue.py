"""
Queue client for handing reply-count repairs to the arq worker.

Used when an in-request refresh fails: the write has already been committed,
so the repair is retried out of band instead of failing the request.
"""

from typing import Any

from arq import create_pool
from arq.connections import ArqRedis, RedisSettings
from redis.exceptions import RedisError

from app.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

# Created on first use, closed from the app lifespan
_pool: ArqRedis | None = None


async def get_queue() -> ArqRedis:
    global _pool
    if _pool is None:
        redis_settings = RedisSettings.from_dsn(settings.ARQ_REDIS_URL)
        redis_settings.conn_retries = 1
        _pool = await create_pool(redis_settings)
        logger.info("arq_pool_created", redis_url=settings.ARQ_REDIS_URL)
    return _pool


async def enqueue_job(function_name: str, *args: Any, _job_id: str | None = None, **kwargs: Any) -> str | None:
    """
    Enqueue a job for the arq worker.

    Returns:
        Job ID, or None when the job was not queued (duplicate job ID or
        Redis unavailable; the latter is logged)
    """
    try:
        pool = await get_queue()
        job = await pool.enqueue_job(function_name, *args, _job_id=_job_id, **kwargs)
    except (OSError, RedisError) as e:
        logger.error(
            "job_enqueue_error",
            function=function_name,
            error=str(e),
            error_type=type(e).__name__,
        )
        return None

    if job is None:
        # Same _job_id already queued
        logger.debug("job_already_queued", function=function_name, job_id=_job_id)
        return None

    logger.debug("job_enqueued", function=function_name, job_id=job.job_id)
    return job.job_id


async def enqueue_reply_count_refresh(comment_id: int) -> str | None:
    """Queue a refresh of one thread; repeated requests for a thread collapse into one job."""
    return await enqueue_job(
        "refresh_thread_reply_count_job",
        comment_id,
        _job_id=f"reply_count:{comment_id}",
    )


async def close_queue() -> None:
    """Close the arq Redis pool (call on shutdown)."""
    global _pool
    if _pool is not None:
        await _pool.aclose()
        _pool = None
        logger.info("arq_pool_closed")
