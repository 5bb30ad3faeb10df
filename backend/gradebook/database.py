"""
Database connection and session management module.

Uses SQLAlchemy for ORM operations. SQLite is the default store (a
single-file database next to the application); PostgreSQL is supported
through DATABASE_URL.
"""

import os
from contextlib import contextmanager
from datetime import datetime, timezone
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, DeclarativeBase

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    "sqlite:///./academic_ranking.db"
)

# SQLite does not support pool_size, max_overflow, or pool_pre_ping
engine_kwargs = {"echo": False}

if DATABASE_URL.startswith("postgresql"):
    engine_kwargs.update({
        "pool_size": 10,
        "max_overflow": 20,
        "pool_pre_ping": True,
    })
elif DATABASE_URL.startswith("sqlite"):
    # FastAPI runs sync routes in a threadpool
    engine_kwargs["connect_args"] = {"check_same_thread": False}

engine = create_engine(DATABASE_URL, **engine_kwargs)


def set_sqlite_pragma(dbapi_connection, connection_record):
    """Enable WAL journaling and foreign keys on every new SQLite connection."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


if DATABASE_URL.startswith("sqlite"):
    event.listen(engine, "connect", set_sqlite_pragma)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""
    pass


def get_db():
    """
    FastAPI dependency that provides a database session.

    Yields a session and closes it once the request has been handled.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope():
    """Session for work outside a request (startup seeding, scripts)."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def utc_now_iso() -> str:
    """Timestamps are stored as ISO 8601 text in UTC."""
    return datetime.now(timezone.utc).isoformat()


def create_tables():
    """
    Create all database tables directly (used for SQLite).
    For PostgreSQL, use Alembic migrations instead.
    """
    Base.metadata.create_all(bind=engine)
