# src/phoenix_blog/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import payments_router, posts_router, tags_router

__all__ = [
    "payments_router",
    "posts_router",
    "tags_router",
]
