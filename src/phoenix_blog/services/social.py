"""Lookups against the like, bookmark, comment and follow stores."""
from __future__ import annotations

import uuid
from collections.abc import Collection
from dataclasses import dataclass

from sqlalchemy import delete, exists, func, select
from sqlalchemy.orm import Session

from phoenix_blog.models import Bookmark, Comment, Follow, PostLike


@dataclass(frozen=True)
class ViewerSignals:
    """Per-viewer reaction state passed through to a post projection."""

    like_count: int = 0
    comment_count: int = 0
    liked_by_viewer: bool = False
    bookmarked_by_viewer: bool = False


def like_count(db: Session, post_id: uuid.UUID) -> int:
    """Return the number of likes on a post."""
    stmt = select(func.count()).select_from(PostLike).where(PostLike.post_id == post_id)
    return int(db.execute(stmt).scalar_one())


def comment_count(db: Session, post_id: uuid.UUID) -> int:
    """Return the number of comments (replies included) on a post."""
    stmt = select(func.count()).select_from(Comment).where(Comment.post_id == post_id)
    return int(db.execute(stmt).scalar_one())


def liked_by(db: Session, post_id: uuid.UUID, user_id: uuid.UUID | None) -> bool:
    """Return True if the user liked the post; anonymous users never have."""
    if user_id is None:
        return False
    stmt = select(
        exists().where(PostLike.post_id == post_id, PostLike.user_id == user_id)
    )
    return bool(db.execute(stmt).scalar())


def is_bookmarked(db: Session, post_id: uuid.UUID, user_id: uuid.UUID | None) -> bool:
    """Return True if the user bookmarked the post."""
    if user_id is None:
        return False
    stmt = select(
        exists().where(Bookmark.post_id == post_id, Bookmark.user_id == user_id)
    )
    return bool(db.execute(stmt).scalar())


def ids_followed_by(db: Session, user_id: uuid.UUID) -> list[uuid.UUID]:
    """Return the identifiers of every user ``user_id`` follows."""
    stmt = select(Follow.following_id).where(Follow.follower_id == user_id)
    return list(db.execute(stmt).scalars())


def viewer_signals(db: Session, post_id: uuid.UUID, viewer_id: uuid.UUID | None) -> ViewerSignals:
    """Collect the collaborator-owned flags and counters for one post."""
    return ViewerSignals(
        like_count=like_count(db, post_id),
        comment_count=comment_count(db, post_id),
        liked_by_viewer=liked_by(db, post_id, viewer_id),
        bookmarked_by_viewer=is_bookmarked(db, post_id, viewer_id),
    )


def signals_for_posts(
    db: Session,
    post_ids: Collection[uuid.UUID],
    viewer_id: uuid.UUID | None,
) -> dict[uuid.UUID, ViewerSignals]:
    """Collect :class:`ViewerSignals` for many posts in four queries."""
    if not post_ids:
        return {}
    ids = list(post_ids)

    likes = dict(
        db.execute(
            select(PostLike.post_id, func.count())
            .where(PostLike.post_id.in_(ids))
            .group_by(PostLike.post_id)
        ).all()
    )
    comments = dict(
        db.execute(
            select(Comment.post_id, func.count())
            .where(Comment.post_id.in_(ids))
            .group_by(Comment.post_id)
        ).all()
    )
    liked: set[uuid.UUID] = set()
    bookmarked: set[uuid.UUID] = set()
    if viewer_id is not None:
        liked = set(
            db.execute(
                select(PostLike.post_id).where(
                    PostLike.post_id.in_(ids), PostLike.user_id == viewer_id
                )
            ).scalars()
        )
        bookmarked = set(
            db.execute(
                select(Bookmark.post_id).where(
                    Bookmark.post_id.in_(ids), Bookmark.user_id == viewer_id
                )
            ).scalars()
        )

    return {
        post_id: ViewerSignals(
            like_count=int(likes.get(post_id, 0)),
            comment_count=int(comments.get(post_id, 0)),
            liked_by_viewer=post_id in liked,
            bookmarked_by_viewer=post_id in bookmarked,
        )
        for post_id in ids
    }


def delete_bookmarks(db: Session, post_id: uuid.UUID) -> None:
    """Delete every bookmark of a post."""
    db.execute(delete(Bookmark).where(Bookmark.post_id == post_id))


def delete_likes(db: Session, post_id: uuid.UUID) -> None:
    """Delete every like on a post."""
    db.execute(delete(PostLike).where(PostLike.post_id == post_id))


def delete_comments(db: Session, post_id: uuid.UUID) -> None:
    """Delete the comments on a post, replies before their parents."""
    db.execute(
        delete(Comment).where(Comment.post_id == post_id, Comment.parent_id.is_not(None))
    )
    db.execute(delete(Comment).where(Comment.post_id == post_id))
