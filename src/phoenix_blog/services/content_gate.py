"""Viewer-specific projection of posts, including premium content gating.

The gate is a pure function of (post, viewer, paid): callers resolve the
payment state and collaborator signals up front and pass them in.
"""
from __future__ import annotations

import enum
import math
import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy.orm import Session

from phoenix_blog.models import Post
from phoenix_blog.repositories.post_repo import PostRepository
from phoenix_blog.services.social import ViewerSignals, signals_for_posts, viewer_signals

WORDS_PER_MINUTE = 200

# Premium bodies are withheld entirely from viewers who have not paid.
GATED_CONTENT = ""


class Access(enum.Enum):
    """How much of a post body a viewer receives."""

    FULL = "full"
    GATED = "gated"


@dataclass(frozen=True)
class GateDecision:
    """Outcome of gating one post for one viewer."""

    access: Access
    is_author: bool
    paid: bool

    @property
    def is_full(self) -> bool:
        return self.access is Access.FULL


@dataclass(frozen=True)
class PostProjection:
    """What a particular viewer is allowed to see of a post."""

    id: uuid.UUID
    title: str
    content: str
    author_name: str
    author_email: str
    created_at: datetime
    updated_at: datetime
    status: str
    is_premium: bool
    price: int
    view_count: int
    reading_time_minutes: int
    is_author: bool
    paid_by_current_user: bool
    tags: list[str] = field(default_factory=list)
    like_count: int = 0
    comment_count: int = 0
    liked_by_current_user: bool = False
    bookmarked_by_current_user: bool = False


def word_count(text: str | None) -> int:
    """Return the number of whitespace-separated words in ``text``."""
    if not text or not text.strip():
        return 0
    return len(text.split())


def reading_time_minutes(text: str | None) -> int:
    """Estimate reading time at 200 words per minute, never below one minute."""
    return max(1, math.ceil(word_count(text) / WORDS_PER_MINUTE))


def gate_content(post: Post, viewer_id: uuid.UUID | None, paid: bool) -> GateDecision:
    """Decide whether ``viewer_id`` may read the full body of ``post``."""
    is_author = viewer_id is not None and post.author_id == viewer_id
    paid = bool(paid) and viewer_id is not None
    if not post.is_premium or is_author or paid:
        return GateDecision(Access.FULL, is_author=is_author, paid=paid)
    return GateDecision(Access.GATED, is_author=is_author, paid=paid)


def project_post(
    post: Post,
    viewer_id: uuid.UUID | None,
    paid: bool,
    signals: ViewerSignals | None = None,
) -> PostProjection:
    """Build the projection of ``post`` for ``viewer_id``.

    Reading time is always derived from the full body, even when the body
    itself is withheld.
    """
    decision = gate_content(post, viewer_id, paid)
    signals = signals or ViewerSignals()
    return PostProjection(
        id=post.id,
        title=post.title,
        content=post.content if decision.is_full else GATED_CONTENT,
        author_name=post.author.name,
        author_email=post.author.email,
        created_at=post.created_at,
        updated_at=post.updated_at,
        status=post.status.value,
        is_premium=post.is_premium,
        price=post.price,
        view_count=post.view_count,
        reading_time_minutes=reading_time_minutes(post.content),
        is_author=decision.is_author,
        paid_by_current_user=decision.paid,
        tags=post.tag_names,
        like_count=signals.like_count,
        comment_count=signals.comment_count,
        liked_by_current_user=signals.liked_by_viewer,
        bookmarked_by_current_user=signals.bookmarked_by_viewer,
    )


def render_post(db: Session, post: Post, viewer_id: uuid.UUID | None) -> PostProjection:
    """Resolve payment and collaborator state, then project ``post``."""
    paid = False
    if viewer_id is not None and post.is_premium and post.author_id != viewer_id:
        paid = PostRepository(db).has_completed_payment(post.id, viewer_id)
    return project_post(post, viewer_id, paid, viewer_signals(db, post.id, viewer_id))


def render_posts(
    db: Session,
    posts: Sequence[Post],
    viewer_id: uuid.UUID | None,
) -> list[PostProjection]:
    """Project a page of posts for one viewer.

    Payment state and collaborator signals are fetched for the whole batch
    at once, so the query count does not grow with the number of posts.
    """
    if not posts:
        return []
    paid_ids: set[uuid.UUID] = set()
    if viewer_id is not None:
        premium_ids = [p.id for p in posts if p.is_premium and p.author_id != viewer_id]
        paid_ids = PostRepository(db).paid_post_ids(premium_ids, viewer_id)
    signals = signals_for_posts(db, [p.id for p in posts], viewer_id)
    return [
        project_post(post, viewer_id, post.id in paid_ids, signals[post.id])
        for post in posts
    ]
