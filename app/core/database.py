"""
Async engine and session handling.

Request handlers get a session through ``get_db``; arq jobs and maintenance
scripts open one with ``session_scope``. Sessions keep attribute values after
commit so response models can be built from rows that were just written.
"""

from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.config import settings


def _engine_options(url: str) -> dict[str, Any]:
    options: dict[str, Any] = {"echo": settings.DB_ECHO}
    if url.startswith("sqlite"):
        # No pool sizing for SQLite
        return options
    options.update(
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=True,
        pool_recycle=3600,
    )
    return options


engine = create_async_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

SessionFactory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding the request's session.

    Handlers commit their own writes. Whatever is still pending when the
    handler returns is committed here; an exception rolls it back.
    """
    async with SessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """
    Session for work outside a request (arq jobs, scripts).

    The caller commits. Uncommitted changes are rolled back if the block
    raises.

        async with session_scope() as db:
            await refresh_reply_count(db, comment_id)
            await db.commit()
    """
    async with SessionFactory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
