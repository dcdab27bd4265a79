# src/phoenix_blog/models/social.py
"""Reaction and relationship rows owned by neighbouring services.

Feed ordering counts likes, projections pass through like/bookmark flags and
comment counts, and post teardown deletes these rows, so the tables are mapped
here even though their write paths live elsewhere.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from phoenix_blog.db.session import Base
from phoenix_blog.db.time import utcnow


class PostLike(Base):
    """Per-user like on a post."""

    __tablename__ = "post_like"
    __table_args__ = (Index("ix_post_like_post_id", "post_id"),)

    # Composite primary key prevents duplicate likes from the same user.
    post_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("post.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("app_user.id"),
        primary_key=True,
    )


class Bookmark(Base):
    """A post saved by a user for later."""

    __tablename__ = "bookmark"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("app_user.id"),
        primary_key=True,
    )
    post_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("post.id", ondelete="CASCADE"),
        primary_key=True,
    )


class Comment(Base):
    """Comment on a post; replies point at their parent comment."""

    __tablename__ = "comment"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    post_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("app_user.id"), nullable=False)
    parent_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("comment.id"),
        nullable=True,
    )
    body: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )


class Follow(Base):
    """Directed follow edge between two users."""

    __tablename__ = "follow"

    follower_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("app_user.id"),
        primary_key=True,
    )
    following_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("app_user.id"),
        primary_key=True,
    )
