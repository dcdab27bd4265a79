"""Service-level helpers for reading and writing posts."""
from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence

from sqlalchemy import delete
from sqlalchemy.orm import Session

from phoenix_blog.models import Payment, Post, PostStatus, PostView, User
from phoenix_blog.repositories.post_repo import PostRepository
from phoenix_blog.services import social
from phoenix_blog.services.content_gate import PostProjection, render_post
from phoenix_blog.services.errors import PostNotFoundError, UnauthorizedError
from phoenix_blog.services.tags import resolve_tags
from phoenix_blog.services.views import record_view

logger = logging.getLogger(__name__)


def _get_post_or_raise(db: Session, post_id: uuid.UUID) -> Post:
    post = PostRepository(db).get_by_id(post_id)
    if post is None:
        raise PostNotFoundError(f"Post not found with id: {post_id}")
    return post


def get_post(db: Session, post_id: uuid.UUID, viewer_id: uuid.UUID | None) -> PostProjection:
    """Count the view (authenticated viewers only) and return the gated projection."""
    post = _get_post_or_raise(db, post_id)
    if record_view(db, post, viewer_id):
        db.commit()
    return render_post(db, post, viewer_id)


def create_post(
    db: Session,
    *,
    author: User,
    title: str,
    content: str,
    is_premium: bool = False,
    price: int = 0,
    tags: Sequence[str | None] | None = None,
    save_as_draft: bool = False,
) -> Post:
    """Create a post for ``author`` and attach its canonical tags.

    Args:
        db: Active database session.
        author: Authenticated author.
        title: Post title.
        content: Full body text.
        is_premium: Whether the body is paywalled.
        price: Price in the smallest currency unit; kept at 0 for free posts.
        tags: Raw tag strings; normalized and capped by the tag resolver.
        save_as_draft: Store as DRAFT instead of PUBLISHED.
    """
    post = Post(
        title=title,
        content=content,
        author_id=author.id,
        is_premium=is_premium,
        price=price if is_premium else 0,
        status=PostStatus.DRAFT if save_as_draft else PostStatus.PUBLISHED,
    )
    post.tags = resolve_tags(db, tags)
    db.add(post)
    db.commit()
    db.refresh(post)
    logger.info("Post %s created by %s (%s)", post.id, author.id, post.status.value)
    return post


def update_post(
    db: Session,
    post_id: uuid.UUID,
    *,
    editor: User,
    title: str,
    content: str,
    is_premium: bool = False,
    price: int = 0,
    tags: Sequence[str | None] | None = None,
    save_as_draft: bool = False,
) -> Post:
    """Rewrite a post; only its author may do so.

    The tag set is replaced wholesale: previous associations are detached,
    the tags themselves stay.

    Raises:
        PostNotFoundError: If the post does not exist.
        UnauthorizedError: If ``editor`` is not the author.
    """
    post = _get_post_or_raise(db, post_id)
    if post.author_id != editor.id:
        raise UnauthorizedError("You are not authorized to update this post")

    post.title = title
    post.content = content
    post.is_premium = is_premium
    post.price = price if is_premium else 0
    post.status = PostStatus.DRAFT if save_as_draft else PostStatus.PUBLISHED
    post.tags = resolve_tags(db, tags)
    db.commit()
    db.refresh(post)
    logger.info("Post %s updated by %s", post.id, editor.id)
    return post


def delete_post(db: Session, post_id: uuid.UUID, *, requester: User) -> None:
    """Tear a post down together with everything that references it.

    Bookmarks, payments, views, likes, comment replies, comments, tag links
    and finally the post go in that order within one transaction; any
    failure rolls the whole teardown back.

    Raises:
        PostNotFoundError: If the post does not exist.
        UnauthorizedError: If ``requester`` is neither the author nor an admin.
    """
    post = _get_post_or_raise(db, post_id)
    if post.author_id != requester.id and not requester.is_admin:
        raise UnauthorizedError("You are not authorized to delete this post")

    try:
        social.delete_bookmarks(db, post.id)
        db.execute(delete(Payment).where(Payment.post_id == post.id))
        db.execute(delete(PostView).where(PostView.post_id == post.id))
        social.delete_likes(db, post.id)
        social.delete_comments(db, post.id)
        post.tags = []
        db.delete(post)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Post %s deleted by %s", post_id, requester.id)
