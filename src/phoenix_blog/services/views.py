"""Unique-per-viewer view counting."""
from __future__ import annotations

import logging
import uuid

from sqlalchemy import exists, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from phoenix_blog.models import Post, PostView
from phoenix_blog.repositories.post_repo import PostRepository

logger = logging.getLogger(__name__)


def has_viewed(db: Session, post_id: uuid.UUID, viewer_id: uuid.UUID) -> bool:
    """Return True if a view has already been recorded for the pair."""
    stmt = select(exists().where(PostView.post_id == post_id, PostView.user_id == viewer_id))
    return bool(db.execute(stmt).scalar())


def _reload_view_count(db: Session, post: Post) -> None:
    db.refresh(post, attribute_names=["view_count"])


def record_view(db: Session, post: Post, viewer_id: uuid.UUID | None) -> bool:
    """Count ``viewer_id``'s first view of ``post``.

    The (post, viewer) unique constraint decides the winner when two first
    views race: only the request whose insert lands increments the counter.
    The loser sees the IntegrityError, leaves the count alone and reloads
    ``post.view_count`` so it reports the winner's increment.

    Args:
        db: Active database session; the caller commits.
        post: The post being viewed.
        viewer_id: Authenticated viewer, or None for anonymous readers.

    Returns:
        True if this call incremented the view counter.
    """
    if viewer_id is None:
        return False
    if has_viewed(db, post.id, viewer_id):
        _reload_view_count(db, post)
        return False

    try:
        with db.begin_nested():
            db.add(PostView(post_id=post.id, user_id=viewer_id))
    except IntegrityError:
        logger.debug("Concurrent first view of post %s by %s; not counting", post.id, viewer_id)
        _reload_view_count(db, post)
        return False

    PostRepository(db).increment_view_count(post.id)
    _reload_view_count(db, post)
    return True
