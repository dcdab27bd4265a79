# src/phoenix_blog/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .payments import router as payments_router
from .posts import router as posts_router
from .tags import router as tags_router

__all__ = [
    "payments_router",
    "posts_router",
    "tags_router",
]
