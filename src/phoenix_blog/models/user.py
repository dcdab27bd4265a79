# src/phoenix_blog/models/user.py
"""SQLAlchemy model for the minimal user record the core consumes."""

from __future__ import annotations

import enum
import uuid

from sqlalchemy import Enum, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from phoenix_blog.db.session import Base


class UserRole(enum.Enum):
    """Authorization role of an account."""

    USER = "USER"
    ADMIN = "ADMIN"


class User(Base):
    """Account identity resolved from the bearer token.

    Registration and profile management live outside this service; only the
    fields needed for ownership and admin checks are mapped here.
    """

    __tablename__ = "app_user"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, native_enum=False, length=16),
        nullable=False,
        default=UserRole.USER,
    )

    @property
    def is_admin(self) -> bool:
        """Return True when the account carries the admin role."""
        return self.role == UserRole.ADMIN
