"""Database session factory and configuration.

Provides database connectivity and session management. The ingestion
pipeline opens one session per inbound message, so the factory is handed
around explicitly instead of being looked up globally.
"""

from contextlib import contextmanager
from typing import Callable, Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .config import get_settings
from .models.base import Base

SessionFactory = Callable[[], Session]


def build_engine(database_url: Optional[str] = None) -> Engine:
    """Create an engine for the configured database.

    Pool settings only apply to server databases (not SQLite).
    """
    url = database_url or get_settings().DATABASE_URL

    engine_kwargs = {
        "pool_pre_ping": True,  # Verify connections before using
        "echo": False,
    }

    if url.startswith("sqlite"):
        # Per-message workers share the engine across threads
        engine_kwargs["connect_args"] = {"check_same_thread": False}
    else:
        engine_kwargs["pool_size"] = 5
        engine_kwargs["max_overflow"] = 10

    return create_engine(url, **engine_kwargs)


def build_session_factory(engine: Engine) -> sessionmaker:
    """Create a session factory bound to engine."""
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine,
    )


def init_db(engine: Engine) -> None:
    """Create all tables that do not exist yet."""
    Base.metadata.create_all(bind=engine)


@contextmanager
def session_scope(session_factory: SessionFactory) -> Generator[Session, None, None]:
    """Context manager for database sessions.

    Usage:
        with session_scope(SessionLocal) as session:
            session.query(Vendor).all()

    Automatically commits on success, rolls back on exception.
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
