"""
arq worker for reply-count repairs.

Run with: arq app.tasks.worker.WorkerSettings
"""

from typing import Any

from arq.connections import RedisSettings
from arq.cron import cron
from arq.worker import func

from app.config import settings
from app.core.logging import configure_logging, get_logger
from app.tasks.comment_jobs import refresh_reply_counts_job, refresh_thread_reply_count_job

logger = get_logger(__name__)


def refresh_minutes(interval: int) -> set[int]:
    """Minutes of the hour at which the periodic repair runs."""
    return set(range(0, 60, interval))


async def startup(ctx: dict[str, Any]) -> None:
    """Configure logging for the worker process."""
    configure_logging()
    logger.info(
        "arq_worker_starting",
        redis_url=settings.ARQ_REDIS_URL,
        refresh_minutes=settings.REPLY_COUNT_REFRESH_MINUTES,
    )


async def shutdown(ctx: dict[str, Any]) -> None:
    logger.info("arq_worker_shutdown")


class WorkerSettings:
    """ARQ worker configuration."""

    redis_settings = RedisSettings.from_dsn(settings.ARQ_REDIS_URL)

    max_jobs = 4
    job_timeout = 600
    keep_result = settings.ARQ_KEEP_RESULT

    on_startup = startup
    on_shutdown = shutdown

    functions = [
        func(refresh_thread_reply_count_job, max_tries=3),
    ]

    cron_jobs = [
        cron(
            refresh_reply_counts_job,
            minute=refresh_minutes(settings.REPLY_COUNT_REFRESH_MINUTES),
            run_at_startup=True,
            unique=True,
        ),
    ]
