"""Database engine and session helpers for roster and rule storage."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .models import Base

DEFAULT_DB_URL = "sqlite:///staffing.db"
MEMORY_DB_URL = "sqlite://"


def create_db_engine(db_url: str = DEFAULT_DB_URL, echo: bool = False) -> Engine:
    """Create SQLAlchemy engine. In-memory SQLite shares one connection."""
    if db_url in (MEMORY_DB_URL, "sqlite:///:memory:"):
        return create_engine(
            db_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(db_url, echo=echo)


def init_database(db_url: str = DEFAULT_DB_URL) -> Engine:
    """Create roster and rule tables if missing."""
    engine = create_db_engine(db_url)
    Base.metadata.create_all(engine)
    print(f"[INFO] Database initialized: {db_url}")
    return engine


def get_session_factory(db_url: str = DEFAULT_DB_URL, engine: Engine | None = None) -> sessionmaker:
    """Session factory bound to ``engine`` (or a new engine for ``db_url``)."""
    return sessionmaker(bind=engine or create_db_engine(db_url), expire_on_commit=False)


@contextmanager
def session_scope(session_factory: sessionmaker) -> Iterator[Session]:
    """Session that rolls back on error and is always closed."""
    session = session_factory()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def reset_database(db_url: str = DEFAULT_DB_URL) -> None:
    """Drop and recreate all tables (deletes roster and rules)."""
    engine = create_db_engine(db_url)
    Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    print(f"[WARN] Database reset: {db_url}")
