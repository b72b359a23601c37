"""
Tests for the moderation gate.

These tests cover:
- Public visibility (approval of the comment and its whole ancestor chain)
- Admin status filters
- The approval state machine
"""

from datetime import UTC, datetime, timedelta

import pytest

from app.core.exceptions import ValidationError
from app.models.comment import Comments
from app.services.comment_tree import build_comment_tree
from app.services.moderation import (
    ensure_transition,
    filter_threads,
    matches_status,
    public_visible,
)

BASE = datetime(2024, 3, 1, 9, 0, tzinfo=UTC)


def comment(comment_id: int, parent_id: int | None = None, approved: bool = True) -> Comments:
    return Comments(
        id=comment_id,
        post_id=1,
        parent_id=parent_id,
        author_name=f"Author {comment_id}",
        author_email=f"a{comment_id}@example.com",
        content=f"Text {comment_id}",
        is_approved=approved,
        created_at=BASE + timedelta(minutes=comment_id),
        updated_at=BASE + timedelta(minutes=comment_id),
    )


@pytest.mark.unit
class TestPublicVisible:
    """Tests for public_visible()."""

    def test_excludes_unapproved(self):
        comments = [comment(1), comment(2, approved=False), comment(3)]

        assert [c.id for c in public_visible(comments)] == [1, 3]

    def test_reply_under_pending_parent_is_hidden(self):
        comments = [
            comment(1, approved=False),
            comment(2, parent_id=1),
            comment(3, parent_id=2),
        ]

        assert public_visible(comments) == []

    def test_reply_under_missing_parent_is_hidden(self):
        comments = [comment(1), comment(5, parent_id=4)]

        assert [c.id for c in public_visible(comments)] == [1]

    def test_hidden_middle_hides_only_its_branch(self):
        comments = [
            comment(1),
            comment(2, parent_id=1, approved=False),
            comment(3, parent_id=2),
            comment(4, parent_id=1),
        ]

        assert [c.id for c in public_visible(comments)] == [1, 4]

    def test_cycle_is_hidden(self):
        comments = [comment(1, parent_id=2), comment(2, parent_id=1)]

        assert public_visible(comments) == []

    def test_all_approved_threads_survive_tree_building(self):
        comments = [comment(1), comment(2, parent_id=1), comment(3, parent_id=2)]

        threads = build_comment_tree(public_visible(comments), orphans="drop")

        assert [r.id for r in threads[0].replies] == [2, 3]


@pytest.mark.unit
class TestStatusFilters:
    """Tests for matches_status() and filter_threads()."""

    def test_matches_status(self):
        approved = comment(1)
        pending = comment(2, approved=False)

        assert matches_status(approved, "all")
        assert matches_status(pending, "all")
        assert matches_status(approved, "approved")
        assert not matches_status(pending, "approved")
        assert matches_status(pending, "pending")
        assert not matches_status(approved, "pending")

    def test_filter_threads_keeps_threads_with_matching_replies(self):
        comments = [
            comment(1),
            comment(2, parent_id=1, approved=False),
            comment(3, parent_id=1),
            comment(4),
        ]
        threads = build_comment_tree(comments)

        pending = filter_threads(threads, "pending")

        assert [t.id for t in pending] == [1]
        assert [r.id for r in pending[0].replies] == [2]
        # The original threads are untouched
        assert [r.id for r in threads[0].replies] == [2, 3]

    def test_filter_threads_all_is_identity(self):
        threads = build_comment_tree([comment(1), comment(2, approved=False)])

        assert [t.id for t in filter_threads(threads, "all")] == [1, 2]


@pytest.mark.unit
class TestEnsureTransition:
    """Tests for the approval state machine."""

    def test_pending_to_approved(self):
        assert ensure_transition(comment(1, approved=False), True) is True

    def test_reapprove_is_noop(self):
        assert ensure_transition(comment(1), True) is False

    def test_pending_stays_pending_is_noop(self):
        assert ensure_transition(comment(1, approved=False), False) is False

    def test_approved_to_pending_rejected(self):
        with pytest.raises(ValidationError):
            ensure_transition(comment(1), False)
