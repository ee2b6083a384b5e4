"""
Module: housing_kernel.db.engine
Responsibility: One process-wide SQLAlchemy engine for the SQL backing, and
    the ``session_scope`` every table rewrite runs inside.
Architecture position: Kernel > DB.  Used by db/sql_backing.py and by the
    configuration bridge.  Nothing in domain/, records/ or services/
    touches it.

Invariants enforced:
    - Any SQLAlchemy URL is accepted; SQLite is the default.  An in-memory
      SQLite URL is bound to one shared connection, otherwise each session
      would open its own empty database.
    - A table rewrite is one transaction: committed whole or rolled back.

Failure modes:
    - RuntimeError when a session is requested before
      ``init_engine_from_url()``.
"""

import atexit
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from housing_kernel.logging_config import get_logger

logger = get_logger("db.engine")

DEFAULT_DATABASE_URL = "sqlite:///housing.db"
_MEMORY_URLS = frozenset({"sqlite://", "sqlite:///:memory:"})

_engine: Engine | None = None
_sessions: sessionmaker[Session] | None = None


def init_engine_from_url(
    database_url: str = DEFAULT_DATABASE_URL,
    echo: bool = False,
) -> Engine:
    """
    Create the engine for ``database_url``, replacing any previous one.

    Args:
        database_url: ``sqlite:///housing.db``, ``sqlite://`` for an
            in-memory database, or any other SQLAlchemy URL whose driver is
            installed.
        echo: Emit every SQL statement through SQLAlchemy's logger.
    """
    global _engine, _sessions

    reset_engine()

    options: dict = {"echo": echo}
    if database_url in _MEMORY_URLS:
        options.update(
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )

    _engine = create_engine(database_url, **options)
    _sessions = sessionmaker(bind=_engine, expire_on_commit=False)

    logger.info(
        "engine_initialized",
        extra={"dialect": _engine.dialect.name, "in_memory": database_url in _MEMORY_URLS},
    )
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError("No SQL engine; call init_engine_from_url() first")
    return _engine


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """
    Yield a session that commits on a clean exit and rolls back otherwise.

    The exception that caused a rollback is re-raised unchanged.
    """
    if _sessions is None:
        raise RuntimeError("No SQL engine; call init_engine_from_url() first")
    session = _sessions()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.warning("sql_rewrite_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def create_tables() -> None:
    """Create the ``record_rows`` table if it is missing."""
    from housing_kernel.db.base import Base
    from housing_kernel.db import models  # noqa: F401

    Base.metadata.create_all(get_engine())


def reset_engine() -> None:
    """Dispose the engine and forget it.  Tests call this between cases."""
    global _engine, _sessions

    if _engine is not None:
        _engine.dispose()
    _engine = None
    _sessions = None


def _dispose_at_exit() -> None:
    if _engine is None:
        return
    try:
        _engine.dispose()
    except SQLAlchemyError:
        logger.warning("engine_dispose_failed", exc_info=True)


atexit.register(_dispose_at_exit)
