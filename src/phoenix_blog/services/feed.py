"""Feed query planning: filters, sort order and pagination for post listings."""
from __future__ import annotations

import enum
import math
import uuid
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from phoenix_blog.models import Post, PostStatus
from phoenix_blog.repositories.post_repo import PostRepository
from phoenix_blog.services import social
from phoenix_blog.services.errors import PostNotFoundError
from phoenix_blog.services.tags import normalize_tag_name

T = TypeVar("T")

RELATED_LIMIT = 4
RELATED_FALLBACK_LIMIT = 3


class SortMode(enum.Enum):
    """Ordering applied to a feed page."""

    NEWEST = "newest"
    OLDEST = "oldest"
    MOST_LIKED = "mostLiked"

    @classmethod
    def parse(cls, raw: str | None) -> SortMode:
        """Map a client-supplied sort string to a mode, defaulting to NEWEST."""
        if raw:
            wanted = raw.strip().lower()
            for mode in cls:
                if mode.value.lower() == wanted:
                    return mode
        return cls.NEWEST


@dataclass(frozen=True)
class FeedQuery:
    """Criteria for one public feed page."""

    search: str | None = None
    tag: str | None = None
    sort: SortMode = SortMode.NEWEST
    page: int = 0
    size: int = 6

    def __post_init__(self) -> None:
        if self.page < 0:
            raise ValueError("page must be >= 0")
        if self.size <= 0:
            raise ValueError("size must be > 0")
        search = self.search.strip() if self.search else None
        object.__setattr__(self, "search", search or None)
        object.__setattr__(self, "tag", normalize_tag_name(self.tag))


@dataclass
class FeedPage(Generic[T]):
    """One page of results plus the pagination envelope."""

    content: list[T]
    page_number: int
    page_size: int
    total_elements: int
    total_pages: int = field(init=False)
    first: bool = field(init=False)
    last: bool = field(init=False)

    def __post_init__(self) -> None:
        self.total_pages = math.ceil(self.total_elements / self.page_size) if self.page_size else 0
        self.first = self.page_number == 0
        self.last = self.page_number + 1 >= self.total_pages

    @classmethod
    def empty(cls, page: int, size: int) -> FeedPage[T]:
        """Return a page with no content."""
        return cls(content=[], page_number=page, page_size=size, total_elements=0)

    def map_content(self, func) -> FeedPage:
        """Return a copy whose content is ``func`` applied to the whole list."""
        return FeedPage(
            content=list(func(self.content)),
            page_number=self.page_number,
            page_size=self.page_size,
            total_elements=self.total_elements,
        )


def _run(
    repo: PostRepository,
    query: FeedQuery,
    author_ids: list[uuid.UUID] | None = None,
) -> FeedPage[Post]:
    stmt = repo.published(search=query.search, tag=query.tag, author_ids=author_ids)
    total = repo.count(stmt)
    posts = repo.fetch_page(
        stmt,
        most_liked=query.sort is SortMode.MOST_LIKED,
        oldest_first=query.sort is SortMode.OLDEST,
        offset=query.page * query.size,
        limit=query.size,
    )
    return FeedPage(
        content=posts,
        page_number=query.page,
        page_size=query.size,
        total_elements=total,
    )


def list_feed(db: Session, query: FeedQuery) -> FeedPage[Post]:
    """Return one page of published posts matching ``query``.

    Filters and ordering run as a single paginated statement so page
    boundaries stay stable between requests.
    """
    return _run(PostRepository(db), query)


def trending(db: Session, page: int, size: int) -> FeedPage[Post]:
    """Return published posts ordered by like count, no filters."""
    return list_feed(db, FeedQuery(sort=SortMode.MOST_LIKED, page=page, size=size))


def following_feed(db: Session, viewer_id: uuid.UUID, page: int, size: int) -> FeedPage[Post]:
    """Return newest published posts written by authors the viewer follows."""
    followed = social.ids_followed_by(db, viewer_id)
    if not followed:
        return FeedPage.empty(page, size)
    return _run(PostRepository(db), FeedQuery(page=page, size=size), author_ids=followed)


def related_posts(db: Session, post_id: uuid.UUID) -> list[Post]:
    """Return up to four posts sharing tags with ``post_id``.

    Falls back to the three newest other published posts when nothing shares
    a tag.

    Raises:
        PostNotFoundError: If the source post does not exist.
    """
    repo = PostRepository(db)
    post = repo.get_by_id(post_id)
    if post is None:
        raise PostNotFoundError(f"Post not found with id: {post_id}")

    related: list[Post] = []
    if post.tag_names:
        related = repo.list_related(post, post.tag_names, RELATED_LIMIT)
    if not related:
        related = repo.list_recent_excluding(post.id, RELATED_FALLBACK_LIMIT)
    return related


def drafts_for(db: Session, author_id: uuid.UUID) -> list[Post]:
    """Return the author's own drafts, newest first."""
    return PostRepository(db).list_by_author_and_status(author_id, PostStatus.DRAFT)
