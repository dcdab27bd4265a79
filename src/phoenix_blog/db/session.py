"""Database session configuration."""

from __future__ import annotations

from collections.abc import Generator

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from phoenix_blog.core.settings import settings


class Base(DeclarativeBase):
    """Declarative base shared by all ORM models."""


# Ensure model modules are imported so that metadata is populated when create_all runs.
import phoenix_blog.models  # noqa: E402,F401


def enable_sqlite_savepoints(target: Engine) -> None:
    """Let SQLAlchemy own BEGIN on pysqlite so SAVEPOINTs nest correctly.

    View counting and tag creation rely on ``Session.begin_nested``; the
    pysqlite driver's implicit transaction handling would otherwise commit
    on RELEASE SAVEPOINT.
    """

    @event.listens_for(target, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record) -> None:  # pragma: no cover
        dbapi_connection.isolation_level = None

    @event.listens_for(target, "begin")
    def _emit_begin(conn) -> None:  # pragma: no cover
        conn.exec_driver_sql("BEGIN")


def _build_engine(url: str) -> Engine:
    is_sqlite = url.startswith("sqlite")
    built = create_engine(
        url,
        pool_pre_ping=True,
        echo=settings.sql_debug,
        connect_args={"check_same_thread": False} if is_sqlite else {},
    )
    if is_sqlite:
        enable_sqlite_savepoints(built)
    return built


engine = _build_engine(settings.effective_database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Yield a database session for dependency injection."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables() -> None:
    """Create all database tables."""
    Base.metadata.create_all(bind=engine)


def drop_tables() -> None:
    """Drop all database tables."""
    Base.metadata.drop_all(bind=engine)
