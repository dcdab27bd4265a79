"""Tests for unique-per-viewer view counting."""

from sqlalchemy import func, select, update

from phoenix_blog.models import Post, PostView
from phoenix_blog.services import views


def _view_rows(db_session, post_id) -> int:
    stmt = select(func.count()).select_from(PostView).where(PostView.post_id == post_id)
    return db_session.execute(stmt).scalar_one()


def test_anonymous_view_is_not_counted(db_session, make_post) -> None:
    post = make_post()

    assert views.record_view(db_session, post, None) is False
    assert post.view_count == 0
    assert _view_rows(db_session, post.id) == 0


def test_first_view_counts_once(db_session, make_post, reader) -> None:
    post = make_post()

    assert views.record_view(db_session, post, reader.id) is True
    db_session.commit()
    assert views.record_view(db_session, post, reader.id) is False
    db_session.commit()

    db_session.refresh(post)
    assert post.view_count == 1
    assert _view_rows(db_session, post.id) == 1
    assert views.has_viewed(db_session, post.id, reader.id)


def test_distinct_viewers_each_count(db_session, make_post, make_user) -> None:
    post = make_post()
    for _ in range(3):
        views.record_view(db_session, post, make_user().id)
    db_session.commit()

    db_session.refresh(post)
    assert post.view_count == 3


def test_author_views_count_like_any_reader(db_session, make_post, author) -> None:
    post = make_post()

    assert views.record_view(db_session, post, author.id) is True
    assert post.view_count == 1


def test_losing_a_concurrent_first_view_does_not_increment(
    db_session, make_post, reader, mocker
) -> None:
    """The unique constraint settles the race; the loser leaves the counter alone."""
    post = make_post()
    db_session.add(PostView(post_id=post.id, user_id=reader.id))
    db_session.commit()
    # The existence check ran before the winner's insert landed.
    mocker.patch.object(views, "has_viewed", return_value=False)

    assert views.record_view(db_session, post, reader.id) is False
    db_session.commit()

    db_session.refresh(post)
    assert post.view_count == 0
    assert _view_rows(db_session, post.id) == 1


def _bump_view_count_elsewhere(db_session, post) -> None:
    """Commit a winner's view row and increment without touching ``post``."""
    db_session.execute(
        update(Post)
        .where(Post.id == post.id)
        .values(view_count=Post.view_count + 1)
        .execution_options(synchronize_session=False)
    )
    db_session.commit()


def test_losing_a_concurrent_first_view_sees_winner_count(
    db_session, make_post, reader, mocker
) -> None:
    post = make_post()
    db_session.add(PostView(post_id=post.id, user_id=reader.id))
    _bump_view_count_elsewhere(db_session, post)
    assert post.view_count == 0
    mocker.patch.object(views, "has_viewed", return_value=False)

    assert views.record_view(db_session, post, reader.id) is False

    assert post.view_count == 1
    assert _view_rows(db_session, post.id) == 1


def test_repeat_view_reports_current_count(db_session, make_post, reader) -> None:
    post = make_post()
    db_session.add(PostView(post_id=post.id, user_id=reader.id))
    _bump_view_count_elsewhere(db_session, post)

    assert views.record_view(db_session, post, reader.id) is False
    assert post.view_count == 1


def test_gated_premium_views_still_count(db_session, make_post, reader) -> None:
    post = make_post(is_premium=True, price=500)

    assert views.record_view(db_session, post, reader.id) is True
    assert post.view_count == 1
