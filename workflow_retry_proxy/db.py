"""Database engine and session utilities for the SQL backing store."""

from __future__ import annotations

from contextlib import contextmanager
from functools import lru_cache
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

Base = declarative_base()


@lru_cache()
def get_engine(database_url: str) -> Engine:
    """Create or return a cached SQLAlchemy engine for *database_url*."""

    connect_args = {}
    if database_url.startswith("sqlite"):
        # Patches fan out over worker threads.
        connect_args["check_same_thread"] = False
    return create_engine(database_url, future=True, echo=False, connect_args=connect_args)


@lru_cache()
def get_session_factory(database_url: str) -> sessionmaker[Session]:
    """Return a cached session factory bound to the engine."""

    return sessionmaker(bind=get_engine(database_url), autoflush=False, autocommit=False, future=True)


@contextmanager
def session_scope(database_url: str) -> Generator[Session, None, None]:
    """Provide a transactional scope for DB operations."""

    session = get_session_factory(database_url)()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
