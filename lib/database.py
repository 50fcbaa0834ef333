# =============================================================================
# lib/database.py - SQLAlchemy Engine and Session Management
# =============================================================================
# This module owns the single SQLAlchemy engine for the process and the
# session factory used by request handlers.
#
# Usage:
#   from lib.database import get_db
#
#   @router.get("/things")
#   def list_things(db: Session = Depends(get_db)):
#       ...
# =============================================================================

from __future__ import annotations

import logging
from typing import Iterator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for all ORM tables."""


def build_engine(database_url: str) -> Engine:
    """
    Create an engine for the given URL.

    SQLite connections are shared across FastAPI's threadpool, and an
    in-memory SQLite database is pinned to one connection so every
    session sees the same tables.
    """
    kwargs: dict = {}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool

    engine = create_engine(database_url, **kwargs)

    if database_url.startswith("sqlite"):
        # SQLite ignores foreign keys unless asked per connection
        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


engine = build_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(bind: Engine | None = None) -> None:
    """Create any missing tables."""
    # Import tables so they register on Base.metadata
    from core.models import tables  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables ready")


def check_connection(bind: Engine | None = None) -> None:
    """Run a trivial query; raises if the database is unreachable."""
    with (bind or engine).connect() as connection:
        connection.execute(text("SELECT 1"))


def get_db() -> Iterator[Session]:
    """
    Yield a session for one request and close it afterwards.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
