"""Data access helpers for working with posts."""
from __future__ import annotations

import uuid
from collections.abc import Sequence

from sqlalchemy import Select, func, select, update
from sqlalchemy.orm import Session

from phoenix_blog.models import Payment, PaymentStatus, Post, PostLike, PostStatus, Tag, post_tag

__all__ = ["PostRepository"]


def _like_count_column():
    """Correlated like count for the post being selected."""
    return (
        select(func.count(PostLike.user_id))
        .where(PostLike.post_id == Post.id)
        .correlate(Post)
        .scalar_subquery()
    )


class PostRepository:
    """Thin wrapper around database access for post entities."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get_by_id(self, post_id: uuid.UUID) -> Post | None:
        """Return a post by identifier."""
        return self.session.get(Post, post_id)

    @staticmethod
    def published(
        *,
        search: str | None = None,
        tag: str | None = None,
        author_ids: Sequence[uuid.UUID] | None = None,
    ) -> Select[tuple[Post]]:
        """Build the filtered statement every public feed starts from.

        Args:
            search: Case-insensitive substring matched against the title.
            tag: Canonical tag name the post must carry.
            author_ids: Restrict to posts written by these authors.
        """
        stmt = select(Post).where(Post.status == PostStatus.PUBLISHED)
        if search:
            stmt = stmt.where(Post.title.icontains(search, autoescape=True))
        if tag:
            stmt = stmt.where(Post.tags.any(Tag.name == tag))
        if author_ids is not None:
            stmt = stmt.where(Post.author_id.in_(author_ids))
        return stmt

    def count(self, stmt: Select[tuple[Post]]) -> int:
        """Count the rows an unordered statement would return."""
        counted = select(func.count()).select_from(stmt.order_by(None).subquery())
        return int(self.session.execute(counted).scalar_one())

    def fetch_page(
        self,
        stmt: Select[tuple[Post]],
        *,
        most_liked: bool,
        oldest_first: bool,
        offset: int,
        limit: int,
    ) -> list[Post]:
        """Apply ordering and LIMIT/OFFSET to a filtered statement."""
        if most_liked:
            stmt = stmt.order_by(
                _like_count_column().desc(),
                Post.created_at.desc(),
                Post.id.desc(),
            )
        elif oldest_first:
            stmt = stmt.order_by(Post.created_at.asc(), Post.id.asc())
        else:
            stmt = stmt.order_by(Post.created_at.desc(), Post.id.desc())
        result = self.session.execute(stmt.offset(offset).limit(limit))
        return list(result.scalars())

    def list_related(self, post: Post, tag_names: Sequence[str], limit: int) -> list[Post]:
        """Return published posts sharing tags with ``post``, most shared first."""
        shared = func.count(post_tag.c.tag_id)
        stmt = (
            select(Post)
            .join(post_tag, post_tag.c.post_id == Post.id)
            .join(Tag, Tag.id == post_tag.c.tag_id)
            .where(
                Tag.name.in_(list(tag_names)),
                Post.id != post.id,
                Post.status == PostStatus.PUBLISHED,
            )
            .group_by(Post.id)
            .order_by(shared.desc(), Post.created_at.desc(), Post.id.desc())
            .limit(limit)
        )
        return list(self.session.execute(stmt).scalars())

    def list_recent_excluding(self, post_id: uuid.UUID, limit: int) -> list[Post]:
        """Return the newest published posts other than ``post_id``."""
        stmt = (
            select(Post)
            .where(Post.status == PostStatus.PUBLISHED, Post.id != post_id)
            .order_by(Post.created_at.desc(), Post.id.desc())
            .limit(limit)
        )
        return list(self.session.execute(stmt).scalars())

    def list_by_author_and_status(self, author_id: uuid.UUID, status: PostStatus) -> list[Post]:
        """Return an author's posts in one lifecycle state, newest first."""
        stmt = (
            select(Post)
            .where(Post.author_id == author_id, Post.status == status)
            .order_by(Post.created_at.desc())
        )
        return list(self.session.execute(stmt).scalars())

    def increment_view_count(self, post_id: uuid.UUID, delta: int = 1) -> None:
        """Atomically add ``delta`` to a post's view counter in SQL."""
        self.session.execute(
            update(Post)
            .where(Post.id == post_id)
            .values(view_count=Post.view_count + delta)
            .execution_options(synchronize_session=False)
        )

    def has_completed_payment(self, post_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        """Return True if a COMPLETED payment exists for (post, user)."""
        stmt = select(
            select(Payment.id)
            .where(
                Payment.post_id == post_id,
                Payment.user_id == user_id,
                Payment.status == PaymentStatus.COMPLETED,
            )
            .exists()
        )
        return bool(self.session.execute(stmt).scalar())

    def paid_post_ids(self, post_ids: Sequence[uuid.UUID], user_id: uuid.UUID) -> set[uuid.UUID]:
        """Return the subset of ``post_ids`` the user has a COMPLETED payment for."""
        if not post_ids:
            return set()
        stmt = select(Payment.post_id).where(
            Payment.post_id.in_(list(post_ids)),
            Payment.user_id == user_id,
            Payment.status == PaymentStatus.COMPLETED,
        )
        return set(self.session.execute(stmt).scalars())
