"""
Comment store.

Persistence for comments. Every method works inside the caller's session and
only flushes; committing is up to the endpoint, job or script that owns the
session.
"""

from collections.abc import Sequence

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from app.config import CommentStatus
from app.core.exceptions import NotFoundError, ValidationError
from app.core.logging import get_logger
from app.models.comment import Comments
from app.models.post import Posts, utc_now
from app.schemas.comment import CommentCreate, CommentReplyCreate, CommentUpdate
from app.services.comment_tree import collect_subtree
from app.services.moderation import ensure_transition

logger = get_logger(__name__)


class CommentStore:
    """Comment persistence bound to one database session."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create_comment(
        self,
        data: CommentCreate,
        *,
        author_ip: str | None = None,
        user_agent: str | None = None,
        is_approved: bool = False,
    ) -> Comments:
        """
        Persist a new comment, pending moderation by default.

        Raises:
            NotFoundError: Post or parent comment does not exist
            ValidationError: Post does not accept comments, or the parent
                belongs to a different post
        """
        post = await self.db.get(Posts, data.post_id)
        if post is None:
            raise NotFoundError("Post not found")
        if not post.allow_comments:
            raise ValidationError("Comments are closed for this post")

        if data.parent_id is not None:
            parent = await self.find_by_id(data.parent_id)
            if parent is None:
                raise NotFoundError("Parent comment not found")
            if parent.post_id != data.post_id:
                raise ValidationError("Parent comment belongs to a different post")

        comment = Comments(
            post_id=data.post_id,
            parent_id=data.parent_id,
            author_name=data.author_name,
            author_email=data.author_email,
            author_website=data.author_website,
            content=data.content,
            author_ip=author_ip,
            user_agent=user_agent,
            is_approved=is_approved,
        )
        self.db.add(comment)
        await self.db.flush()
        await self.db.refresh(comment)

        logger.info(
            "comment_created",
            comment_id=comment.id,
            post_id=comment.post_id,
            parent_id=comment.parent_id,
            is_approved=comment.is_approved,
        )
        return comment

    async def create_reply(
        self,
        parent_id: int,
        data: CommentReplyCreate,
        *,
        author_ip: str | None = None,
        user_agent: str | None = None,
    ) -> Comments:
        """Persist an admin reply. The reply inherits the parent's post."""
        parent = await self.get(parent_id)

        reply = Comments(
            post_id=parent.post_id,
            parent_id=parent.id,
            author_name=data.author_name,
            author_email=data.author_email,
            author_website=data.author_website,
            content=data.content,
            author_ip=author_ip,
            user_agent=user_agent,
            is_approved=data.is_approved,
        )
        self.db.add(reply)
        await self.db.flush()
        await self.db.refresh(reply)

        logger.info(
            "comment_reply_created",
            comment_id=reply.id,
            post_id=reply.post_id,
            parent_id=reply.parent_id,
            is_approved=reply.is_approved,
        )
        return reply

    async def find_by_id(self, comment_id: int) -> Comments | None:
        return await self.db.get(Comments, comment_id)

    async def get(self, comment_id: int) -> Comments:
        """Like find_by_id, but raises NotFoundError for an unknown id."""
        comment = await self.find_by_id(comment_id)
        if comment is None:
            raise NotFoundError("Comment not found")
        return comment

    async def find_by_ids(self, comment_ids: Sequence[int]) -> list[Comments]:
        if not comment_ids:
            return []
        result = await self.db.execute(
            select(Comments).where(Comments.id.in_(list(comment_ids)))  # type: ignore[union-attr]
        )
        return list(result.scalars().all())

    async def list_by_post(self, post_id: int) -> list[Comments]:
        """All comments of a post, any status, oldest first."""
        result = await self.db.execute(
            select(Comments)
            .where(Comments.post_id == post_id)  # type: ignore[arg-type]
            .order_by(Comments.created_at.asc(), Comments.id.asc())  # type: ignore[attr-defined,union-attr]
        )
        return list(result.scalars().all())

    async def list_replies(self, comment_id: int) -> list[Comments]:
        """Direct replies of one comment, oldest first."""
        result = await self.db.execute(
            select(Comments)
            .where(Comments.parent_id == comment_id)  # type: ignore[arg-type]
            .order_by(Comments.created_at.asc(), Comments.id.asc())  # type: ignore[attr-defined,union-attr]
        )
        return list(result.scalars().all())

    @staticmethod
    def _apply_filters(query, status: str, post_id: int | None, keyword: str | None):  # type: ignore[no-untyped-def]
        if status == CommentStatus.APPROVED:
            query = query.where(Comments.is_approved == True)  # type: ignore[arg-type]  # noqa: E712
        elif status == CommentStatus.PENDING:
            query = query.where(Comments.is_approved == False)  # type: ignore[arg-type]  # noqa: E712
        if post_id is not None:
            query = query.where(Comments.post_id == post_id)  # type: ignore[arg-type]
        if keyword:
            pattern = f"%{keyword}%"
            query = query.where(
                or_(
                    Comments.content.ilike(pattern),  # type: ignore[attr-defined]
                    Comments.author_name.ilike(pattern),  # type: ignore[attr-defined]
                    Comments.author_email.ilike(pattern),  # type: ignore[attr-defined]
                )
            )
        return query

    async def list_all(
        self,
        page: int,
        per_page: int,
        status: str = CommentStatus.ALL,
        post_id: int | None = None,
        keyword: str | None = None,
    ) -> tuple[list[Comments], int]:
        """
        Admin listing of comments at any depth, newest first.

        Args:
            page: 1-based page number
            per_page: Page size
            status: all, approved or pending
            post_id: Restrict to one post
            keyword: Substring match over content, author name and author email

        Returns:
            (rows for the page, total matching rows)
        """
        count_query = self._apply_filters(
            select(func.count()).select_from(Comments), status, post_id, keyword
        )
        total = (await self.db.execute(count_query)).scalar() or 0

        query = self._apply_filters(select(Comments), status, post_id, keyword)
        query = (
            query.order_by(Comments.created_at.desc(), Comments.id.desc())  # type: ignore[attr-defined,union-attr]
            .offset((page - 1) * per_page)
            .limit(per_page)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all()), total

    def _roots_with_status(self, status: str, post_id: int | None):  # type: ignore[no-untyped-def]
        """IDs of top-level comments whose thread holds a comment with the given status."""
        # Aliases throughout keep the subquery from correlating with the outer query
        root = aliased(Comments)
        top = select(root.id.label("id"), root.id.label("root_id")).where(  # type: ignore[union-attr]
            root.parent_id.is_(None)  # type: ignore[union-attr]
        )
        if post_id is not None:
            top = top.where(root.post_id == post_id)  # type: ignore[arg-type]
        thread = top.cte("thread", recursive=True)

        reply = aliased(Comments)
        thread = thread.union_all(
            select(reply.id, thread.c.root_id).where(reply.parent_id == thread.c.id)  # type: ignore[arg-type]
        )

        row = aliased(Comments)
        return (
            select(thread.c.root_id)
            .join(row, row.id == thread.c.id)  # type: ignore[arg-type]
            .where(row.is_approved == (status == CommentStatus.APPROVED))  # type: ignore[arg-type]
        )

    async def list_top_level(
        self,
        page: int,
        per_page: int,
        post_id: int | None = None,
        status: str = CommentStatus.ALL,
    ) -> tuple[list[Comments], int]:
        """
        Top-level comments only, newest first, with the total count.

        With a status other than ``all``, a top-level comment is listed when it
        or any of its descendants has that status.
        """
        filters = [Comments.parent_id.is_(None)]  # type: ignore[union-attr]
        if post_id is not None:
            filters.append(Comments.post_id == post_id)  # type: ignore[arg-type]
        if status != CommentStatus.ALL:
            filters.append(Comments.id.in_(self._roots_with_status(status, post_id)))  # type: ignore[union-attr]

        total = (
            await self.db.execute(select(func.count()).select_from(Comments).where(*filters))
        ).scalar() or 0

        result = await self.db.execute(
            select(Comments)
            .where(*filters)
            .order_by(Comments.created_at.desc(), Comments.id.desc())  # type: ignore[attr-defined,union-attr]
            .offset((page - 1) * per_page)
            .limit(per_page)
        )
        return list(result.scalars().all()), total

    async def list_top_level_ids(self) -> list[int]:
        result = await self.db.execute(
            select(Comments.id)
            .where(Comments.parent_id.is_(None))  # type: ignore[union-attr]
            .order_by(Comments.id)  # type: ignore[arg-type]
        )
        return [row[0] for row in result.all()]

    async def _edges_for_posts(self, post_ids: set[int]) -> list[tuple[int, int | None]]:
        if not post_ids:
            return []
        result = await self.db.execute(
            select(Comments.id, Comments.parent_id).where(
                Comments.post_id.in_(sorted(post_ids))  # type: ignore[attr-defined]
            )
        )
        return [(row[0], row[1]) for row in result.all()]

    async def list_thread(self, root_ids: Sequence[int]) -> list[Comments]:
        """
        Every comment in the threads rooted at root_ids, roots included.

        Rows come back oldest first; the tree builder does the grouping.
        """
        roots = await self.find_by_ids(root_ids)
        edges = await self._edges_for_posts({r.post_id for r in roots})
        thread_ids = collect_subtree(edges, [r.id for r in roots if r.id is not None])
        if not thread_ids:
            return []

        result = await self.db.execute(
            select(Comments)
            .where(Comments.id.in_(sorted(thread_ids)))  # type: ignore[union-attr]
            .order_by(Comments.created_at.asc(), Comments.id.asc())  # type: ignore[attr-defined,union-attr]
        )
        return list(result.scalars().all())

    async def set_approval(self, comment_id: int, approved: bool) -> Comments:
        """
        Approve a comment.

        Raises:
            NotFoundError: Unknown comment
            ValidationError: Attempt to move an approved comment back to pending
        """
        comment = await self.get(comment_id)
        if ensure_transition(comment, approved):
            comment.is_approved = approved
            comment.updated_at = utc_now()
            self.db.add(comment)
            await self.db.flush()
            await self.db.refresh(comment)
            logger.info("comment_approval_changed", comment_id=comment.id, is_approved=approved)
        return comment

    async def set_approval_many(self, comment_ids: Sequence[int], approved: bool) -> int:
        """
        Apply an approval change to several comments.

        All transitions are checked before anything is written. Unknown ids
        are skipped.

        Returns:
            Number of rows that changed
        """
        comments = await self.find_by_ids(comment_ids)
        to_change = [c for c in comments if ensure_transition(c, approved)]

        now = utc_now()
        for comment in to_change:
            comment.is_approved = approved
            comment.updated_at = now
            self.db.add(comment)
        await self.db.flush()

        logger.info(
            "comments_approval_changed",
            requested=len(comment_ids),
            updated=len(to_change),
            is_approved=approved,
        )
        return len(to_change)

    async def update(self, comment_id: int, data: CommentUpdate) -> Comments:
        """
        Admin edit of author fields and content.

        An ``is_approved`` value goes through the approval state machine.

        Raises:
            NotFoundError: Unknown comment
            ValidationError: Attempt to move an approved comment back to pending
        """
        comment = await self.get(comment_id)

        updates = data.model_dump(exclude_unset=True)
        approved = updates.pop("is_approved", None)
        if approved is not None and ensure_transition(comment, approved):
            comment.is_approved = approved

        for field, value in updates.items():
            setattr(comment, field, value)
        comment.updated_at = utc_now()

        self.db.add(comment)
        await self.db.flush()
        await self.db.refresh(comment)

        logger.info("comment_updated", comment_id=comment.id, fields=sorted(data.model_fields_set))
        return comment

    async def _delete_subtrees(self, roots: Sequence[Comments]) -> int:
        edges = await self._edges_for_posts({r.post_id for r in roots})
        doomed = collect_subtree(edges, [r.id for r in roots if r.id is not None])
        if not doomed:
            return 0

        # Bulk delete; loaded rows matching the IN clause are marked deleted
        await self.db.execute(
            delete(Comments).where(Comments.id.in_(sorted(doomed)))  # type: ignore[union-attr]
        )
        return len(doomed)

    async def delete(self, comment_id: int) -> int:
        """
        Delete a comment and its whole subtree.

        Returns:
            Number of rows deleted

        Raises:
            NotFoundError: Unknown comment
        """
        comment = await self.get(comment_id)
        deleted = await self._delete_subtrees([comment])
        logger.info("comment_deleted", comment_id=comment_id, deleted=deleted)
        return deleted

    async def delete_many(self, comment_ids: Sequence[int]) -> int:
        """Delete several comments with their subtrees. Unknown ids are skipped."""
        comments = await self.find_by_ids(comment_ids)
        deleted = await self._delete_subtrees(comments)
        logger.info("comments_deleted", requested=len(comment_ids), deleted=deleted)
        return deleted

    async def stats(self) -> dict[str, int]:
        """Counts of all, approved and pending comments."""
        result = await self.db.execute(
            select(Comments.is_approved, func.count()).group_by(Comments.is_approved)  # type: ignore[arg-type]
        )
        counts = {bool(row[0]): row[1] for row in result.all()}
        approved = counts.get(True, 0)
        pending = counts.get(False, 0)
        return {"total": approved + pending, "approved": approved, "pending": pending}

    async def recent(self, limit: int) -> list[Comments]:
        """Newest comments across all posts, any status."""
        result = await self.db.execute(
            select(Comments)
            .order_by(Comments.created_at.desc(), Comments.id.desc())  # type: ignore[attr-defined,union-attr]
            .limit(limit)
        )
        return list(result.scalars().all())
