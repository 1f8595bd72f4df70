"""Test fixtures: a fresh SQLite database and app per test.

Each test gets its own database file under tmp_path, created with the
current schema, and its own app instance with an empty SessionStore.
get_db is overridden so every request opens its own session on the test
engine, the same way production requests do.

Clients:
- client: no session cookie
- auth_client: registered and logged in as "alice"
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from linkshelf.auth.sessions import SessionStore
from linkshelf.db.engine import build_engine, get_db, init_db
from linkshelf.main import create_app

from helpers import register_and_login, session_cookie


@pytest_asyncio.fixture()
async def engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'linkshelf-test.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture()
async def db_session(engine):
    """Direct session for store-level tests and for inspecting API writes."""
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture()
def sessions():
    return SessionStore()


@pytest_asyncio.fixture()
async def app(engine, sessions):
    app = create_app(session_store=sessions)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture()
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture()
async def auth_client(app):
    """Client logged in as alice. The cookie is sent as an explicit header."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        token = await register_and_login(ac, "alice", "alice-password")
        ac.headers.update(session_cookie(token))
        yield ac
