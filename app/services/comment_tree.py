"""
Comment tree builder.

Turns a flat list of comments into display threads: each top-level comment
carries every descendant, at any depth, in one flat ``replies`` list ordered
oldest first. Replies keep their ``parent_id`` so clients can still render
"in reply to".

Pure functions only; nothing here touches the database.
"""

from collections import deque
from collections.abc import Iterable, Sequence
from datetime import UTC, datetime
from typing import Any, Literal, TypeVar

from app.schemas.comment import CommentAdminThreadResponse, CommentThreadResponse

OrphanPolicy = Literal["promote", "drop"]

ThreadT = TypeVar("ThreadT", CommentThreadResponse, CommentAdminThreadResponse)


def chronological_key(comment: Any) -> tuple[datetime, int]:
    """
    Sort key for comments: created_at ascending, id as tie-breaker.

    SQLite hands back naive datetimes, so naive values are read as UTC.
    """
    created_at: datetime = comment.created_at
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=UTC)
    return created_at, comment.id or 0


def collect_subtree(edges: Iterable[tuple[int, int | None]], root_ids: Iterable[int]) -> set[int]:
    """
    Collect the ids of the given roots and all their descendants.

    Args:
        edges: (id, parent_id) pairs, typically every comment of one post
        root_ids: Ids to start from

    Returns:
        Set of ids reachable from root_ids through parent links, roots included
    """
    children: dict[int, list[int]] = {}
    for comment_id, parent_id in edges:
        if parent_id is not None:
            children.setdefault(parent_id, []).append(comment_id)

    seen: set[int] = set()
    queue = deque(root_ids)
    while queue:
        current = queue.popleft()
        if current in seen:
            continue
        seen.add(current)
        queue.extend(children.get(current, ()))
    return seen


def _resolve_root(comment: Any, by_id: dict[int, Any]) -> tuple[Any, bool]:
    """
    Walk parent links inside by_id.

    Returns:
        (root, complete) where complete is False when the chain left the list
        or looped before reaching a top-level comment.
    """
    path: list[Any] = []
    position: dict[int, int] = {}
    current = comment
    while current.parent_id is not None:
        if current.id in position:
            # Cycle: elect the lowest id in the loop
            loop = path[position[current.id] :]
            return min(loop, key=lambda c: c.id), False
        position[current.id] = len(path)
        path.append(current)
        parent = by_id.get(current.parent_id)
        if parent is None:
            return current, False
        current = parent
    return current, True


def group_threads(
    comments: Sequence[Any],
    *,
    orphans: OrphanPolicy = "promote",
) -> list[tuple[Any, list[Any]]]:
    """
    Group comments under their top-level ancestor.

    Args:
        comments: Flat comment rows (ORM objects or anything with id,
            parent_id and created_at)
        orphans: What to do with comments whose chain leaves the list:
            "promote" makes the highest ancestor present a root,
            "drop" omits the whole branch

    Returns:
        (root, replies) pairs. Roots keep the input order; replies are sorted
        chronologically.
    """
    by_id = {c.id: c for c in comments}
    root_of: dict[int, int] = {}
    for comment in comments:
        root, complete = _resolve_root(comment, by_id)
        if complete or orphans == "promote":
            root_of[comment.id] = root.id

    replies: dict[int, list[Any]] = {}
    roots: list[Any] = []
    for comment in comments:
        root_id = root_of.get(comment.id)
        if root_id is None:
            continue
        if root_id == comment.id:
            roots.append(comment)
        else:
            replies.setdefault(root_id, []).append(comment)

    return [(root, sorted(replies.get(root.id, []), key=chronological_key)) for root in roots]


def build_comment_tree(
    comments: Sequence[Any],
    *,
    orphans: OrphanPolicy = "promote",
    thread_model: type[ThreadT] = CommentThreadResponse,  # type: ignore[assignment]
) -> list[ThreadT]:
    """
    Build display threads from a flat list of comments.

    Building is idempotent: the same input always gives the same threads,
    and the input rows are never modified.

    Args:
        comments: Flat comment rows
        orphans: "promote" (admin views) or "drop" (public views)
        thread_model: Response model for each thread; the admin variant
            includes author email and provenance fields

    Returns:
        One thread per root, each with a (possibly empty) replies list
    """
    return [
        thread_model.from_models(root, replies)
        for root, replies in group_threads(comments, orphans=orphans)
    ]
