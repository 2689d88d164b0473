"""Database models and session management.

Import models from their respective modules:
    from scorigami_notifier.db.history import GameLog, Team
    from scorigami_notifier.db.notifications import PostedUpdate, QueuedPost

Session management:
    from scorigami_notifier.db import get_session, get_db

Every trigger invocation opens its own session and closes it before
returning; no connection is held between scheduled runs.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from ..config import settings
from ..logging import logger
from .base import Base

# Lazy-loaded engine and session factory so tests can import modules
# without opening a database connection.
_engine: Engine | None = None
_SessionLocal: sessionmaker[Session] | None = None


def _get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = create_engine(
            settings.database_url,
            echo=settings.sql_echo,
            future=True,
            pool_pre_ping=True,
        )
    return _engine


def _get_session_factory() -> sessionmaker[Session]:
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(
            bind=_get_engine(),
            autoflush=False,
            autocommit=False,
            expire_on_commit=False,
            class_=Session,
        )
    return _SessionLocal


@contextmanager
def get_session() -> Iterator[Session]:
    """
    Provide a transactional database session context manager.

    Commits on clean exit, rolls back and re-raises on error.

    Usage:
        with get_session() as session:
            session.add(object)
    """
    session = _get_session_factory()()
    try:
        yield session
        session.commit()
    except Exception as exc:
        session.rollback()
        logger.exception("db_session_rollback", error=str(exc))
        raise
    finally:
        session.close()


def get_db() -> Iterator[Session]:
    """FastAPI dependency for database sessions with commit/rollback semantics."""
    with get_session() as session:
        yield session


__all__ = ["Base", "Session", "get_session", "get_db"]
