"""Storage failure translation: busy databases and exhausted pools."""

import sqlite3

import pytest
import pytest_asyncio
from sqlalchemy import exc as sa_exc
from sqlalchemy.ext.asyncio import AsyncSession

from linkshelf.config import settings
from linkshelf.db.engine import build_engine, init_db
from linkshelf.errors import StorageUnavailable, storage_errors
from linkshelf.services.user_store import UserStore


@pytest_asyncio.fixture()
async def tight_engine(tmp_path, monkeypatch):
    """One connection, short waits."""
    monkeypatch.setattr(settings, "db_pool_size", 1)
    monkeypatch.setattr(settings, "db_max_overflow", 0)
    monkeypatch.setattr(settings, "db_pool_timeout", 0.1)
    monkeypatch.setattr(settings, "db_busy_timeout", 0.1)
    path = tmp_path / "busy.db"
    engine = build_engine(f"sqlite+aiosqlite:///{path}")
    await init_db(engine)
    yield engine, path
    await engine.dispose()


@pytest.mark.asyncio
async def test_locked_database_is_unavailable(tight_engine):
    engine, path = tight_engine
    blocker = sqlite3.connect(path, timeout=0.1, isolation_level=None)
    blocker.execute("BEGIN IMMEDIATE")
    try:
        async with AsyncSession(engine, expire_on_commit=False) as db:
            store = UserStore(db)
            with pytest.raises(StorageUnavailable):
                await store.create_user("alice", "h1")
            assert not db.in_transaction()
    finally:
        blocker.execute("ROLLBACK")
        blocker.close()

    async with AsyncSession(engine, expire_on_commit=False) as db:
        user_id = await UserStore(db).create_user("alice", "h1")
        assert (await UserStore(db).get_user_by_id(user_id)).username == "alice"


@pytest.mark.asyncio
async def test_exhausted_pool_is_unavailable(tight_engine):
    engine, _ = tight_engine
    async with engine.connect():
        async with AsyncSession(engine, expire_on_commit=False) as db:
            with pytest.raises(StorageUnavailable) as exc:
                await UserStore(db).create_user("alice", "h1")
            assert isinstance(exc.value.__cause__, sa_exc.TimeoutError)

    async with AsyncSession(engine, expire_on_commit=False) as db:
        assert await UserStore(db).create_user("alice", "h1")


@pytest.mark.asyncio
async def test_other_sqlalchemy_errors_are_unavailable(db_session):
    with pytest.raises(StorageUnavailable) as exc:
        async with storage_errors(db_session):
            raise sa_exc.InvalidRequestError("broken statement")
    assert exc.value.biz_code.status_code == 500
