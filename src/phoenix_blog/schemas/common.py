"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Body returned for domain errors."""

    detail: str = Field(..., description="Human-readable reason")
    code: str = Field(..., description="Machine-readable reason")
