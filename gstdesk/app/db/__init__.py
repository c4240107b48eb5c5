from __future__ import annotations

from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from config import get_settings

from ..models import Base
from ..obs.queries import add_query_logger

IN_MEMORY_URLS = {"sqlite://", "sqlite:///:memory:"}


def _create_engine(url: str) -> Engine:
    kwargs: dict = {}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in IN_MEMORY_URLS:
            kwargs["poolclass"] = StaticPool
    engine = create_engine(url, **kwargs)
    add_query_logger(engine, "main")
    return engine


def init_db(url: str | None = None) -> tuple[sessionmaker, Engine]:
    """Create the application engine and session factory from settings.

    In-memory SQLite databases have no migrations to run, so their schema is
    created directly.
    """
    global SessionLocal, engine

    url = url or get_settings().database_url
    engine = _create_engine(url)
    if url in IN_MEMORY_URLS:
        Base.metadata.create_all(bind=engine)
    SessionLocal = sessionmaker(
        bind=engine, autocommit=False, autoflush=False, expire_on_commit=False
    )
    return SessionLocal, engine


def create_test_session() -> tuple[sessionmaker, Engine]:
    """Return a session factory and engine for tests.

    The database uses an in-memory SQLite engine with a static pool so that
    multiple connections share the same data.
    """

    engine = _create_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    session_factory = sessionmaker(
        bind=engine, autocommit=False, autoflush=False, expire_on_commit=False
    )
    return session_factory, engine


def get_session() -> Iterator[Session]:
    """Yield a request-scoped session and close it afterwards."""
    if SessionLocal is None:
        init_db()
    assert SessionLocal is not None  # for type checkers
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


# Populated by ``init_db`` at startup, or by ``create_test_session`` from the
# test ``conftest.py``.
SessionLocal: sessionmaker | None = None
engine: Engine | None = None

__all__ = ["SessionLocal", "engine", "create_test_session", "get_session", "init_db"]
