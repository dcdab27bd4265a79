# src/phoenix_blog/services/__init__.py
"""Business logic services for the Phoenix Blog application."""

from .errors import (
    GatewayError,
    InvalidStateError,
    NotFoundError,
    PhoenixError,
    UnauthorizedError,
)

__all__ = [
    "GatewayError",
    "InvalidStateError",
    "NotFoundError",
    "PhoenixError",
    "UnauthorizedError",
]
