"""
StudySpark Backend — Database Engine Management
=================================================

What:  Async SQLAlchemy engine/session factory builders and the declarative Base.
How:   `create_engine()` builds a pooled async engine for the configured URL;
       `create_session_factory()` wraps it in an async_sessionmaker.
Who:   Used by DatabaseStorage and by Alembic (Base.metadata).
When:  Only when DATABASE_URL is set; the in-memory store never touches this.

Connection Pooling Strategy (PostgreSQL):
    pool_size=20:     Persistent connections for normal load
    max_overflow=10:  Temporary connections for traffic spikes (total max = 30)
    pool_pre_ping:    Validates connections before use (catches stale connections)
    pool_recycle=3600: Recycles connections every hour

    Other dialects (SQLite via aiosqlite in tests) get SQLAlchemy's defaults.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import JSON, DateTime, TypeDecorator
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from studyspark.config import settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Every table registers on `Base.metadata`, which Alembic reads for
    migrations and DatabaseStorage.create_schema() uses for tests.
    """
    pass


def create_engine(database_url: Optional[str] = None) -> AsyncEngine:
    """
    Build the async engine for `database_url` (defaults to settings.database_url).

    Raises:
        ValueError if no URL is available.
    """
    url = database_url or settings.database_url
    if not url:
        raise ValueError("A database URL is required to create an engine")

    kwargs = {
        # Echo SQL queries in DEBUG mode for development visibility
        "echo": settings.log_level == "DEBUG",
    }
    if url.startswith("postgresql"):
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return create_async_engine(url, **kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Session factory bound to `engine`.

    expire_on_commit=False: rows stay readable after commit, so storage
    methods can convert them to response schemas outside the transaction.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


# ── Portable column helpers ───────────────────────────────────────────────
# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


class UTCDateTime(TypeDecorator):
    """
    DateTime(timezone=True) that always hands back UTC-aware values.

    PostgreSQL returns aware datetimes already; SQLite stores no offset and
    returns naive ones, which are read back as UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is not None and value.tzinfo is not None:
            return value.astimezone(timezone.utc)
        return value

    def process_result_value(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


def new_id() -> str:
    """Random UUID4 string used as every table's primary key."""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
