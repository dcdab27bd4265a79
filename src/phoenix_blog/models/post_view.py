# src/phoenix_blog/models/post_view.py
"""Model recording that a viewer has already been counted for a post."""

import uuid

from sqlalchemy import ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from phoenix_blog.db.session import Base


class PostView(Base):
    """One row per (post, viewer); existence alone is the recorded fact."""

    __tablename__ = "post_view"
    __table_args__ = (
        UniqueConstraint("post_id", "user_id", name="uq_post_view_post_user"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    post_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("app_user.id"),
        nullable=False,
    )
