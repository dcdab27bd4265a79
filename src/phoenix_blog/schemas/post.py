# src/phoenix_blog/schemas/post.py
"""Post-related Pydantic schemas."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from phoenix_blog.models.tag import TAG_NAME_MAX_LENGTH


class PostCreate(BaseModel):
    """Schema for creating or rewriting a post."""

    title: str = Field(..., min_length=1, max_length=255, description="Post title")
    content: str = Field(..., min_length=1, description="Full post body")
    is_premium: bool = Field(False, alias="isPremium", description="Paywall the body")
    price: int = Field(0, ge=0, description="Price in the smallest currency unit")
    tags: list[str | None] = Field(default_factory=list, description="Free-text tags (max 5 kept)")
    save_as_draft: bool = Field(False, alias="saveAsDraft", description="Store as DRAFT")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("tags")
    @classmethod
    def _limit_tag_length(cls, tags: list[str | None]) -> list[str | None]:
        for tag in tags:
            if tag is not None and len(tag.strip()) > TAG_NAME_MAX_LENGTH:
                raise ValueError(f"Tags are limited to {TAG_NAME_MAX_LENGTH} characters")
        return tags

    @model_validator(mode="after")
    def _require_price_for_premium(self) -> PostCreate:
        if self.is_premium and self.price <= 0:
            raise ValueError("Premium posts need a positive price")
        return self


class PostResponse(BaseModel):
    """Viewer-specific post projection returned by the API."""

    id: uuid.UUID
    title: str
    content: str
    author_name: str
    author_email: str
    created_at: datetime
    updated_at: datetime
    status: str
    is_premium: bool
    price: int
    view_count: int
    reading_time_minutes: int
    is_author: bool
    paid_by_current_user: bool
    tags: list[str]
    like_count: int
    comment_count: int
    liked_by_current_user: bool
    bookmarked_by_current_user: bool

    model_config = ConfigDict(from_attributes=True)


class PostPage(BaseModel):
    """One page of a feed."""

    content: list[PostResponse]
    page_number: int
    page_size: int
    total_elements: int
    total_pages: int
    first: bool
    last: bool

    model_config = ConfigDict(from_attributes=True)
