#!/usr/bin/env python3
"""
Recompute reply_count for every top-level comment.

Same repair the arq cron job runs, for use after bulk imports or manual
database edits. Each thread is committed on its own, so the script can be
interrupted and rerun safely.

Usage:
    python -m scripts.refresh_reply_counts
"""

import asyncio
import sys

from app.core.database import engine, session_scope
from app.core.logging import configure_logging
from app.services.reply_counter import refresh_all_reply_counts


async def refresh_reply_counts() -> int:
    """Run the repair and print a summary. Returns the process exit code."""
    async with session_scope() as db:
        print("Refreshing reply counts for top-level comments...")
        result = await refresh_all_reply_counts(db)

    await engine.dispose()

    print("\nStatistics:")
    print(f"  Top-level comments: {result.total_comments}")
    print(f"  Refreshed: {result.updated_count}")
    print(f"  Failed: {len(result.errors)}")
    for error in result.errors:
        print(f"    {error}")

    return 1 if result.errors else 0


if __name__ == "__main__":
    configure_logging()
    sys.exit(asyncio.run(refresh_reply_counts()))
