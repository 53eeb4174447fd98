# xiaohonghua/services/db.py
from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

# Import the models' Base so create_all() works
from xiaohonghua.models.transaction import Base
from xiaohonghua.logging_setup import get_logger

logger = get_logger(__name__)

# -----------------------
# Configuration
# -----------------------
DEFAULT_DB_PATH = "data/xiaohonghua.db"

_ENGINE: Optional[Engine] = None

# Session factory (bound in configure_database)
SessionLocal = sessionmaker(autoflush=False, autocommit=False, future=True)


def _make_engine(db_path: str) -> Engine:
    if db_path == ":memory:":
        # one shared connection so every session sees the same in-memory DB
        return create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            future=True,
        )
    # Ensure parent folder exists (e.g., "data/")
    parent = os.path.dirname(db_path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    return create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},  # backup worker reads from its own thread
        future=True,
    )


# -----------------------
# Public API
# -----------------------
def configure_database(db_path: Optional[str] = None) -> Engine:
    """
    (Re)bind the store to a SQLite file. Defaults to $DB_PATH or data/xiaohonghua.db.
    Pass ":memory:" for a throwaway in-memory database.
    """
    global _ENGINE
    if _ENGINE is not None:
        _ENGINE.dispose()
    path = db_path or os.getenv("DB_PATH", DEFAULT_DB_PATH)
    _ENGINE = _make_engine(path)
    SessionLocal.configure(bind=_ENGINE)
    logger.debug("Ledger store bound to %s", path)
    return _ENGINE


def get_engine() -> Engine:
    """Expose the SQLAlchemy Engine, configuring the default one on first use."""
    if _ENGINE is None:
        configure_database()
    return _ENGINE


def init_db() -> None:
    """
    Create all tables defined on Base metadata (no-op if already created).
    Call this once on app startup.
    """
    Base.metadata.create_all(bind=get_engine())


def get_session() -> Session:
    """
    Return a new Session. Remember to close() it after use,
    or prefer the session_scope() context manager below.
    """
    get_engine()
    return SessionLocal()


@contextmanager
def session_scope() -> Iterator[Session]:
    """
    Context manager for a transactional scope:

        with session_scope() as session:
            session.add(...)

    Commits on success; rolls back on exception; always closes.
    """
    session: Session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
