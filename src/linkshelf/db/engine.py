"""Async SQLAlchemy engine and session factory.

SQLAlchemy 2.0 async mode: one engine with a bounded connection pool,
one AsyncSession per request handed out through a FastAPI dependency.

SQLite connections get foreign keys, WAL journaling and a busy timeout so
a locked database surfaces as an error instead of hanging.
"""

from typing import AsyncIterator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from linkshelf.config import settings
from linkshelf.db.models import Base


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an engine with the pool limits from settings."""
    kwargs: dict = {"echo": echo}
    is_sqlite = database_url.startswith("sqlite")
    if is_sqlite:
        kwargs["connect_args"] = {"timeout": settings.db_busy_timeout}
    if is_sqlite and ":memory:" in database_url:
        # Every connection to :memory: is a fresh database, so share one
        kwargs["poolclass"] = StaticPool
    else:
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout,
        )

    engine = create_async_engine(database_url, **kwargs)

    if is_sqlite:
        @event.listens_for(engine.sync_engine, "connect")
        def _sqlite_pragmas(dbapi_connection, _record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.close()

    return engine


engine = build_engine(settings.database_url, echo=settings.debug)

# Session factory, each request gets its own session.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency, yields a session per request and always closes it."""
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db(bind: AsyncEngine = engine) -> None:
    """Create any missing tables for the current schema."""
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
