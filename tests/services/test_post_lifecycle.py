"""Tests for writing, reading and tearing down posts."""

import uuid

import pytest
from sqlalchemy import func, select

from phoenix_blog.models import (
    Bookmark,
    Comment,
    Payment,
    PaymentStatus,
    Post,
    PostLike,
    PostStatus,
    PostView,
    Tag,
    post_tag,
)
from phoenix_blog.services import post_service
from phoenix_blog.services.content_gate import GATED_CONTENT
from phoenix_blog.services.errors import PostNotFoundError, UnauthorizedError


def _count(db_session, model) -> int:
    return db_session.execute(select(func.count()).select_from(model)).scalar_one()


def test_create_post_normalizes_tags(db_session, author) -> None:
    post = post_service.create_post(
        db_session,
        author=author,
        title="Hello",
        content="First words",
        tags=["Go", " go ", "RUST", "go"],
    )

    assert post.status is PostStatus.PUBLISHED
    assert sorted(post.tag_names) == ["go", "rust"]
    assert post.view_count == 0


def test_create_draft_and_free_price(db_session, author) -> None:
    post = post_service.create_post(
        db_session,
        author=author,
        title="Draft",
        content="Not yet",
        is_premium=False,
        price=900,
        save_as_draft=True,
    )

    assert post.status is PostStatus.DRAFT
    assert post.price == 0


def test_update_replaces_tag_set(db_session, author, make_post) -> None:
    post = make_post(tags=["python", "web"])

    updated = post_service.update_post(
        db_session,
        post.id,
        editor=author,
        title="Renamed",
        content="New body",
        is_premium=True,
        price=300,
        tags=["rust"],
    )

    assert updated.title == "Renamed"
    assert updated.tag_names == ["rust"]
    assert updated.is_premium and updated.price == 300
    # Old tags survive without the association.
    assert _count(db_session, Tag) == 3


def test_only_author_may_update(db_session, reader, make_post) -> None:
    post = make_post()

    with pytest.raises(UnauthorizedError):
        post_service.update_post(db_session, post.id, editor=reader, title="x", content="y")


def test_update_unknown_post(db_session, author) -> None:
    with pytest.raises(PostNotFoundError):
        post_service.update_post(db_session, uuid.uuid4(), editor=author, title="x", content="y")


def test_get_post_counts_authenticated_view(db_session, make_post, reader) -> None:
    post = make_post(is_premium=True, price=500)

    first = post_service.get_post(db_session, post.id, reader.id)
    second = post_service.get_post(db_session, post.id, reader.id)
    anonymous = post_service.get_post(db_session, post.id, None)

    assert first.view_count == 1
    assert second.view_count == 1
    assert anonymous.view_count == 1
    assert first.content == GATED_CONTENT


def test_get_post_unknown(db_session) -> None:
    with pytest.raises(PostNotFoundError):
        post_service.get_post(db_session, uuid.uuid4(), None)


def _decorate(db_session, post, user) -> None:
    parent = Comment(post_id=post.id, user_id=user.id, body="first")
    db_session.add(parent)
    db_session.flush()
    db_session.add_all(
        [
            Comment(post_id=post.id, user_id=user.id, parent_id=parent.id, body="reply"),
            PostLike(post_id=post.id, user_id=user.id),
            Bookmark(user_id=user.id, post_id=post.id),
            PostView(post_id=post.id, user_id=user.id),
            Payment(
                user_id=user.id,
                post_id=post.id,
                order_id=f"order_{post.id.hex[:8]}",
                amount=post.price,
                currency="INR",
                status=PaymentStatus.COMPLETED,
            ),
        ]
    )
    db_session.commit()


def test_delete_tears_down_dependents(db_session, author, reader, make_post) -> None:
    doomed = make_post(is_premium=True, price=500, tags=["python"])
    survivor = make_post(is_premium=True, price=500, tags=["python"])
    _decorate(db_session, doomed, reader)
    _decorate(db_session, survivor, reader)

    post_service.delete_post(db_session, doomed.id, requester=author)

    assert db_session.get(Post, doomed.id) is None
    for model in (Comment, PostLike, Bookmark, PostView, Payment):
        remaining = db_session.execute(select(model.post_id)).scalars().all()
        assert remaining and set(remaining) == {survivor.id}, model.__name__
    links = db_session.execute(select(post_tag.c.post_id)).scalars().all()
    assert links == [survivor.id]
    assert _count(db_session, Tag) == 1


def test_admin_may_delete_any_post(db_session, admin_user, make_post) -> None:
    post = make_post()

    post_service.delete_post(db_session, post.id, requester=admin_user)

    assert db_session.get(Post, post.id) is None


def test_stranger_may_not_delete(db_session, reader, make_post) -> None:
    post = make_post()

    with pytest.raises(UnauthorizedError):
        post_service.delete_post(db_session, post.id, requester=reader)
    assert db_session.get(Post, post.id) is not None


def test_failed_teardown_rolls_back(db_session, author, reader, make_post, mocker) -> None:
    post = make_post()
    _decorate(db_session, post, reader)
    mocker.patch.object(
        post_service.social,
        "delete_comments",
        side_effect=RuntimeError("boom"),
    )

    with pytest.raises(RuntimeError):
        post_service.delete_post(db_session, post.id, requester=author)

    assert _count(db_session, Bookmark) == 1
    assert _count(db_session, Payment) == 1
    assert _count(db_session, PostLike) == 1
    assert db_session.get(Post, post.id) is not None
