"""
Database engine and session handling.

SQLite by default; any SQLAlchemy URL works through ``DATABASE_URL``.
Tables are created at startup with ``init_db``; there are no migrations.
"""

from collections.abc import Iterator

from loguru import logger
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from cellar.config import settings


class Base(DeclarativeBase):
    pass


def build_engine(database_url: str) -> Engine:
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    return create_engine(database_url, connect_args=connect_args)


engine = build_engine(settings.database_url)
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(bind: Engine | None = None) -> None:
    # Registers the tables on Base.metadata.
    from cellar.models import records  # noqa: F401

    target = bind or engine
    Base.metadata.create_all(bind=target)
    logger.info("Database ready url={}", target.url.render_as_string(hide_password=True))


def ping(session: Session) -> None:
    session.execute(text("SELECT 1"))


def get_session() -> Iterator[Session]:
    """FastAPI dependency yielding one session per request."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
