# src/phoenix_blog/models/payment.py
"""Payment records backing the premium-content unlock flow."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from phoenix_blog.db.session import Base
from phoenix_blog.db.time import utcnow


class PaymentStatus(enum.Enum):
    """Payment lifecycle; COMPLETED and FAILED are terminal."""

    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        """Return True when no further transition is allowed."""
        return self is not PaymentStatus.PENDING


class Payment(Base):
    """A provider order raised by a user for one premium post.

    Rows are kept for audit; unlocking only asks whether a COMPLETED row
    exists for the (post, user) pair.
    """

    __tablename__ = "payment"
    __table_args__ = (
        Index("ix_payment_post_user_status", "post_id", "user_id", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("app_user.id"),
        nullable=False,
    )
    post_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=False,
    )
    order_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    payment_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(8), nullable=False, default="INR")
    status: Mapped[PaymentStatus] = mapped_column(
        Enum(PaymentStatus, native_enum=False, length=16),
        nullable=False,
        default=PaymentStatus.PENDING,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
