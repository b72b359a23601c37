"""
Moderation gate.

Decides what a reader may see and which approval changes are allowed.

Approval state machine:
- pending -> approved: allowed
- approved -> approved: no-op
- approved -> pending: rejected (delete the comment instead)
- rejection means deletion; there is no "rejected" state
"""

from collections.abc import Sequence
from typing import Any, TypeVar

from app.config import CommentStatus
from app.core.exceptions import ValidationError
from app.schemas.comment import CommentAdminThreadResponse, CommentThreadResponse

ThreadT = TypeVar("ThreadT", CommentThreadResponse, CommentAdminThreadResponse)


def public_visible(comments: Sequence[Any]) -> list[Any]:
    """
    Filter comments down to what the public may see.

    A comment is visible when it is approved and every ancestor inside the
    list is approved too. A reply whose parent is hidden or missing is hidden.
    Input order is preserved.
    """
    by_id = {c.id: c for c in comments}
    visible: dict[int, bool] = {}

    def is_visible(comment: Any) -> bool:
        # Walk up the chain; every id on it shares the verdict
        chain: list[Any] = []
        seen: set[int] = set()
        current = comment
        while True:
            if current.id in visible:
                result = visible[current.id]
                break
            if current.id in seen:
                result = False
                break
            chain.append(current)
            seen.add(current.id)
            if not current.is_approved:
                result = False
                break
            if current.parent_id is None:
                result = True
                break
            parent = by_id.get(current.parent_id)
            if parent is None:
                result = False
                break
            current = parent
        for item in chain:
            visible[item.id] = result
        return result

    return [c for c in comments if is_visible(c)]


def matches_status(comment: Any, status: str) -> bool:
    """Check a comment against an admin status filter (all/approved/pending)."""
    if status == CommentStatus.APPROVED:
        return bool(comment.is_approved)
    if status == CommentStatus.PENDING:
        return not comment.is_approved
    return True


def filter_threads(threads: Sequence[ThreadT], status: str) -> list[ThreadT]:
    """
    Apply a status filter to already-built threads.

    Replies are filtered individually. A thread is kept when its root matches
    or at least one of its replies does.
    """
    if status == CommentStatus.ALL:
        return list(threads)

    filtered: list[ThreadT] = []
    for thread in threads:
        replies = [r for r in thread.replies if matches_status(r, status)]
        if matches_status(thread, status) or replies:
            filtered.append(thread.model_copy(update={"replies": replies}))
    return filtered


def ensure_transition(comment: Any, approved: bool) -> bool:
    """
    Validate an approval change.

    Returns:
        True if the row needs to be written, False for a no-op

    Raises:
        ValidationError: When moving an approved comment back to pending
    """
    if bool(comment.is_approved) == approved:
        return False
    if comment.is_approved and not approved:
        raise ValidationError(
            f"Comment {comment.id} is already approved and cannot return to pending; delete it instead"
        )
    return True
