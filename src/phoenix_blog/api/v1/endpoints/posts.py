# src/phoenix_blog/api/v1/endpoints/posts.py
"""Post and feed endpoints for the Phoenix Blog API."""

import uuid

from fastapi import APIRouter, Query, status

from phoenix_blog.api.v1.dependencies import CurrentUserDep, OptionalUserDep, SessionDep
from phoenix_blog.core.settings import settings
from phoenix_blog.models import User
from phoenix_blog.schemas.post import PostCreate, PostPage, PostResponse
from phoenix_blog.services import feed, post_service
from phoenix_blog.services.content_gate import render_post, render_posts
from phoenix_blog.services.feed import FeedPage, FeedQuery, SortMode

router = APIRouter(prefix="/posts", tags=["posts"])

PageQuery = Query(0, ge=0, description="Zero-based page index")
SizeQuery = Query(
    settings.feed_default_page_size,
    ge=1,
    le=settings.feed_max_page_size,
    description="Page size",
)


def _viewer_id(user: User | None) -> uuid.UUID | None:
    return user.id if user is not None else None


def _to_page(db, page: FeedPage, viewer_id: uuid.UUID | None) -> PostPage:
    projected = page.map_content(lambda posts: render_posts(db, posts, viewer_id))
    return PostPage(
        content=[PostResponse.model_validate(item) for item in projected.content],
        page_number=projected.page_number,
        page_size=projected.page_size,
        total_elements=projected.total_elements,
        total_pages=projected.total_pages,
        first=projected.first,
        last=projected.last,
    )


@router.get("/", response_model=PostPage)
async def list_posts(
    db: SessionDep,
    viewer: OptionalUserDep,
    search: str | None = Query(None, description="Case-insensitive title substring"),
    tag: str | None = Query(None, description="Tag name filter"),
    sort: str | None = Query("newest", description="newest, oldest or mostLiked"),
    page: int = PageQuery,
    size: int = SizeQuery,
) -> PostPage:
    """List published posts with optional search, tag filter and ordering.

    Unknown ``sort`` values fall back to newest first.
    """
    query = FeedQuery(search=search, tag=tag, sort=SortMode.parse(sort), page=page, size=size)
    return _to_page(db, feed.list_feed(db, query), _viewer_id(viewer))


@router.get("/trending", response_model=PostPage)
async def list_trending(
    db: SessionDep,
    viewer: OptionalUserDep,
    page: int = PageQuery,
    size: int = SizeQuery,
) -> PostPage:
    """List published posts by like count."""
    return _to_page(db, feed.trending(db, page, size), _viewer_id(viewer))


@router.get("/following", response_model=PostPage)
async def list_following(
    db: SessionDep,
    current_user: CurrentUserDep,
    page: int = PageQuery,
    size: int = SizeQuery,
) -> PostPage:
    """List newest posts from authors the caller follows."""
    return _to_page(db, feed.following_feed(db, current_user.id, page, size), current_user.id)


@router.get("/my-drafts", response_model=list[PostResponse])
async def list_my_drafts(db: SessionDep, current_user: CurrentUserDep) -> list[PostResponse]:
    """List the caller's own drafts."""
    drafts = feed.drafts_for(db, current_user.id)
    return [
        PostResponse.model_validate(item)
        for item in render_posts(db, drafts, current_user.id)
    ]


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(post_id: uuid.UUID, db: SessionDep, viewer: OptionalUserDep) -> PostResponse:
    """Get a post, counting the view for authenticated readers.

    Raises:
        PostNotFoundError: If the post does not exist.
    """
    return PostResponse.model_validate(post_service.get_post(db, post_id, _viewer_id(viewer)))


@router.get("/{post_id}/related", response_model=list[PostResponse])
async def get_related_posts(
    post_id: uuid.UUID,
    db: SessionDep,
    viewer: OptionalUserDep,
) -> list[PostResponse]:
    """List up to four posts related to ``post_id`` by shared tags."""
    related = feed.related_posts(db, post_id)
    return [
        PostResponse.model_validate(item)
        for item in render_posts(db, related, _viewer_id(viewer))
    ]


@router.post("/", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    post_data: PostCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> PostResponse:
    """Create a post (or draft) authored by the caller."""
    post = post_service.create_post(
        db,
        author=current_user,
        title=post_data.title,
        content=post_data.content,
        is_premium=post_data.is_premium,
        price=post_data.price,
        tags=post_data.tags,
        save_as_draft=post_data.save_as_draft,
    )
    return PostResponse.model_validate(render_post(db, post, current_user.id))


@router.put("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: uuid.UUID,
    post_data: PostCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> PostResponse:
    """Rewrite a post; only its author may do so."""
    post = post_service.update_post(
        db,
        post_id,
        editor=current_user,
        title=post_data.title,
        content=post_data.content,
        is_premium=post_data.is_premium,
        price=post_data.price,
        tags=post_data.tags,
        save_as_draft=post_data.save_as_draft,
    )
    return PostResponse.model_validate(render_post(db, post, current_user.id))


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(
    post_id: uuid.UUID,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> None:
    """Delete a post and everything attached to it (author or admin only)."""
    post_service.delete_post(db, post_id, requester=current_user)
