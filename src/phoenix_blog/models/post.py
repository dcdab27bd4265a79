# src/phoenix_blog/models/post.py
"""SQLAlchemy models for posts and related attributes."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from phoenix_blog.db.session import Base
from phoenix_blog.db.time import utcnow

from .tag import post_tag

if TYPE_CHECKING:
    from .tag import Tag
    from .user import User


class PostStatus(enum.Enum):
    """Lifecycle of a post; drafts never appear in public feeds."""

    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"


class Post(Base):
    """Primary content entity written by an author.

    Premium posts carry a price in the smallest currency unit and require a
    completed payment (or authorship) before the full body is shown.
    """

    __tablename__ = "post"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_post_price_non_negative"),
        CheckConstraint("view_count >= 0", name="ck_post_view_count_non_negative"),
        Index("ix_post_status_created_at", "status", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("app_user.id"),
        nullable=False,
        index=True,
    )
    status: Mapped[PostStatus] = mapped_column(
        Enum(PostStatus, native_enum=False, length=16),
        nullable=False,
        default=PostStatus.PUBLISHED,
    )
    is_premium: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    price: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    # Only ever moved forward by the view counter's atomic increment.
    view_count: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    author: Mapped[User] = relationship("User", lazy="selectin")
    tags: Mapped[list[Tag]] = relationship(
        "Tag",
        secondary=post_tag,
        back_populates="posts",
        lazy="selectin",
    )

    @property
    def tag_names(self) -> list[str]:
        """Return the names of the attached tags."""
        return [tag.name for tag in self.tags]
