# src/phoenix_blog/models/__init__.py
"""SQLAlchemy models for the Phoenix Blog application."""

from .payment import Payment, PaymentStatus
from .post import Post, PostStatus
from .post_view import PostView
from .social import Bookmark, Comment, Follow, PostLike
from .tag import Tag, post_tag
from .user import User, UserRole

__all__ = [
    "Payment", "PaymentStatus",
    "Post", "PostStatus",
    "PostView",
    "Bookmark", "Comment", "Follow", "PostLike",
    "Tag", "post_tag",
    "User", "UserRole",
]
