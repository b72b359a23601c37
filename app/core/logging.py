"""
Structured logging configuration using structlog.

Console output in development, JSON everywhere else (or when LOG_FORMAT=json).
Request-scoped fields (request ID, method, path and, on admin routes, the
admin ID) are bound with structlog's contextvars, so a comment write can be
traced from the HTTP request down to the store call. arq jobs bind their own
task fields the same way.
"""

import logging
import sys
from typing import Any, cast

import structlog
from structlog.types import Processor

from app.config import settings


def _renderer() -> Processor:
    if settings.LOG_FORMAT == "json" or settings.ENVIRONMENT != "development":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def configure_logging() -> None:
    """
    Route structlog through the stdlib root logger at LOG_LEVEL.

    Safe to call more than once; the API and the worker both call it.
    """
    level = logging.getLevelName(settings.LOG_LEVEL.upper())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _renderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level, force=True)

    # SQL echo is controlled by DB_ECHO, not the log level
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    if settings.ENVIRONMENT != "development":
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a logger instance with the given name.

    Example:
        logger = get_logger(__name__)
        logger.info("comment_created", comment_id=12, post_id=3)
    """
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))


def bind_request(request_id: str, method: str, path: str) -> None:
    """Start a fresh log context for an incoming request."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id, method=method, path=path)


def bind_admin(admin_id: int) -> None:
    """Attach the authenticated admin to the rest of the request's logs."""
    structlog.contextvars.bind_contextvars(admin_id=admin_id)


def bind_job(**fields: Any) -> None:
    """
    Start a fresh log context for an arq job.

        bind_job(task="reply_count_refresh", comment_id=comment_id)
    """
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**fields)


def clear_request() -> None:
    structlog.contextvars.clear_contextvars()
