# src/phoenix_blog/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .common import ErrorResponse
from .payment import (
    OrderCreate,
    OrderResponse,
    PaymentCheckResponse,
    PaymentVerifyRequest,
    PaymentVerifyResponse,
)
from .post import PostCreate, PostPage, PostResponse

__all__ = [
    "ErrorResponse",
    "OrderCreate", "OrderResponse",
    "PaymentCheckResponse", "PaymentVerifyRequest", "PaymentVerifyResponse",
    "PostCreate", "PostPage", "PostResponse",
]
