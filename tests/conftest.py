# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterable, Iterator
from datetime import UTC, datetime, timedelta
from itertools import count
from typing import Any
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-phoenix-blog")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RAZORPAY_KEY_ID", "rzp_test_key")
os.environ.setdefault("RAZORPAY_KEY_SECRET", "rzp_test_secret")

from phoenix_blog.api.v1.dependencies import get_payment_gateway
from phoenix_blog.core.security import create_access_token, payment_signature
from phoenix_blog.core.settings import settings
from phoenix_blog.db.session import Base, enable_sqlite_savepoints
from phoenix_blog.db.session import get_db as app_get_session
from phoenix_blog.main import app as fastapi_app
from phoenix_blog.models import Post, PostLike, PostStatus, User, UserRole
from phoenix_blog.services.razorpay import RazorpayClient, RazorpayOrder
from phoenix_blog.services.tags import resolve_tags

TEST_DB_URL = "sqlite://"

_BASE_TIME = datetime(2024, 1, 1, 9, 0, tzinfo=UTC)
_USER_COUNTER = count(1)
_POST_COUNTER = count(1)
_ORDER_COUNTER = count(1)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_savepoints(engine)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()

        # Services commit on their own, so wipe every table between tests.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Return a factory persisting users with unique e-mail addresses."""

    def _make(name: str | None = None, role: UserRole = UserRole.USER) -> User:
        n = next(_USER_COUNTER)
        user = User(email=f"user{n}@example.com", name=name or f"User {n}", role=role)
        db_session.add(user)
        db_session.commit()
        return user

    return _make


@pytest.fixture()
def author(make_user: Callable[..., User]) -> User:
    return make_user("Alice Author")


@pytest.fixture()
def reader(make_user: Callable[..., User]) -> User:
    return make_user("Rita Reader")


@pytest.fixture()
def admin_user(make_user: Callable[..., User]) -> User:
    return make_user("Adam Admin", role=UserRole.ADMIN)


def bearer(user: User) -> dict[str, str]:
    """Return authorization headers for ``user``."""
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture()
def author_headers(author: User) -> dict[str, str]:
    return bearer(author)


@pytest.fixture()
def reader_headers(reader: User) -> dict[str, str]:
    return bearer(reader)


@pytest.fixture()
def admin_headers(admin_user: User) -> dict[str, str]:
    return bearer(admin_user)


@pytest.fixture()
def make_post(db_session: Session, author: User) -> Callable[..., Post]:
    """Return a factory for persisted posts.

    Each post is stamped one minute after the previous one unless
    ``created_at`` is given, so creation order is also chronological order.
    """

    def _make(
        *,
        title: str | None = None,
        content: str = "Lorem ipsum dolor sit amet",
        tags: Iterable[str] = (),
        is_premium: bool = False,
        price: int = 0,
        status: PostStatus = PostStatus.PUBLISHED,
        created_at: datetime | None = None,
        written_by: User | None = None,
    ) -> Post:
        n = next(_POST_COUNTER)
        stamp = created_at or _BASE_TIME + timedelta(minutes=n)
        post = Post(
            title=title or f"Post {n}",
            content=content,
            author_id=(written_by or author).id,
            is_premium=is_premium,
            price=price,
            status=status,
            created_at=stamp,
            updated_at=stamp,
        )
        post.tags = resolve_tags(db_session, list(tags))
        db_session.add(post)
        db_session.commit()
        db_session.refresh(post)
        return post

    return _make


@pytest.fixture()
def add_likes(db_session: Session, make_user: Callable[..., User]) -> Callable[[Post, int], None]:
    """Return a helper that likes ``post`` from ``n`` fresh users."""

    def _like(post: Post, n: int) -> None:
        for _ in range(n):
            db_session.add(PostLike(post_id=post.id, user_id=make_user().id))
        db_session.commit()

    return _like


def sign(order_id: str, payment_id: str) -> str:
    """Produce the checkout signature the provider would send."""
    return payment_signature(order_id, payment_id, settings.razorpay_key_secret)


@pytest.fixture()
def gateway() -> AsyncMock:
    """Provider client double minting sequential order ids."""
    client = AsyncMock(spec=RazorpayClient)
    client.key_id = settings.razorpay_key_id

    def _create_order(*, amount: int, currency: str, receipt: str) -> RazorpayOrder:
        return RazorpayOrder(
            id=f"order_test_{next(_ORDER_COUNTER)}",
            amount=amount,
            currency=currency,
            receipt=receipt,
            status="created",
        )

    client.create_order.side_effect = _create_order
    return client


@pytest.fixture()
def override_gateway(app: FastAPI, gateway: AsyncMock) -> Iterator[Any]:
    """Route the payment endpoints to the provider double."""
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    try:
        yield gateway
    finally:
        app.dependency_overrides.pop(get_payment_gateway, None)
