"""Tag resolution: map free-text tag strings onto canonical Tag rows."""
from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from phoenix_blog.models import Tag, post_tag

logger = logging.getLogger(__name__)

MAX_TAGS_PER_POST = 5


def normalize_tag_name(raw: str | None) -> str | None:
    """Return the canonical form of a tag name, or None if it is blank."""
    if raw is None:
        return None
    name = raw.strip().lower()
    return name or None


def canonical_tag_names(raw_names: Iterable[str | None] | None) -> list[str]:
    """Normalize, deduplicate and cap a list of raw tag strings.

    First occurrences win and anything beyond ``MAX_TAGS_PER_POST`` is
    dropped without complaint.
    """
    names: list[str] = []
    for raw in raw_names or ():
        name = normalize_tag_name(raw)
        if name is None or name in names:
            continue
        names.append(name)
        if len(names) == MAX_TAGS_PER_POST:
            break
    return names


def _get_by_name(db: Session, name: str) -> Tag | None:
    return db.execute(select(Tag).where(Tag.name == name)).scalars().first()


def _get_or_create(db: Session, name: str) -> Tag:
    tag = _get_by_name(db, name)
    if tag is not None:
        return tag

    try:
        with db.begin_nested():
            tag = Tag(name=name)
            db.add(tag)
    except IntegrityError:
        # Another request created the same name first; use its row.
        logger.debug("Tag %r created concurrently, re-fetching", name)
        tag = _get_by_name(db, name)
        if tag is None:
            raise
    return tag


def resolve_tags(db: Session, raw_names: Iterable[str | None] | None) -> list[Tag]:
    """Resolve raw tag strings to canonical Tag rows, creating missing ones.

    Args:
        db: Active database session.
        raw_names: Tag strings as typed by the author; may contain blanks,
            duplicates and mixed case.

    Returns:
        At most ``MAX_TAGS_PER_POST`` distinct tags in first-seen order.
    """
    return [_get_or_create(db, name) for name in canonical_tag_names(raw_names)]


def list_used_tag_names(db: Session) -> list[str]:
    """Return tags attached to at least one post, most used first, then by name."""
    usage = func.count(post_tag.c.post_id)
    stmt = (
        select(Tag.name)
        .join(post_tag, post_tag.c.tag_id == Tag.id)
        .group_by(Tag.name)
        .order_by(usage.desc(), Tag.name.asc())
    )
    return list(db.execute(stmt).scalars())
