from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from .config import Settings

Base = declarative_base()


def build_engine(settings: Settings) -> Engine:
    """
    Create the engine for the configured backend.

    SQLite is only used for local runs and tests; an in-memory database is
    pinned to a single connection so every session sees the same data.
    """
    if settings.is_sqlite:
        options = {"connect_args": {"check_same_thread": False}}
        if settings.DATABASE_URL in ("sqlite://", "sqlite:///:memory:"):
            options["poolclass"] = StaticPool
        return create_engine(settings.DATABASE_URL, echo=settings.DEBUG, **options)

    return create_engine(
        settings.DATABASE_URL,
        poolclass=QueuePool,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=30,  # Timeout in seconds to get a connection from the pool
        pool_recycle=3600,  # Recycle connections after 1 hour
        pool_pre_ping=True,  # Test connections before using them
        echo=settings.DEBUG,
        connect_args={
            "options": "-c timezone=utc",
            "connect_timeout": 10,
        }
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@contextmanager
def session_scope(session_factory: sessionmaker) -> Iterator[Session]:
    """
    Yield a short-lived session.
    Rolls back on any exception and always closes the session.
    """
    db = session_factory()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
