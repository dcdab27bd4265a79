# src/phoenix_blog/models/tag.py
"""SQLAlchemy models for tags and the post/tag association."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Column, ForeignKey, String, Table, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from phoenix_blog.db.session import Base

if TYPE_CHECKING:
    from .post import Post

# Canonical names are trimmed and lowercased before they reach this column.
TAG_NAME_MAX_LENGTH = 50

post_tag = Table(
    "post_tag",
    Base.metadata,
    Column("post_id", Uuid, ForeignKey("post.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Uuid, ForeignKey("tag.id", ondelete="CASCADE"), primary_key=True),
)


class Tag(Base):
    """Canonical tag shared across posts; created lazily and never deleted."""

    __tablename__ = "tag"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(TAG_NAME_MAX_LENGTH), unique=True, nullable=False)

    posts: Mapped[list[Post]] = relationship(
        "Post",
        secondary=post_tag,
        back_populates="tags",
    )
