"""linkshelf CLI: database setup, account bootstrap and the dev server.

Usage:
    linkshelf init-db                              # Create tables
    linkshelf create-user alice --password s3cret  # bcrypt-hashed account
    linkshelf create-user bob --password-hash h1   # store a precomputed hash as-is
    linkshelf serve --reload                       # Run the API with uvicorn
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import sys
from typing import Optional

import click

from linkshelf import __version__


def _run(coro):
    """Run an async coroutine from a synchronous Click handler.

    Falls back to a worker thread when an event loop is already running
    (e.g. CliRunner inside an async test).
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _engine(database_url: Optional[str]):
    from linkshelf.config import settings
    from linkshelf.db.engine import build_engine

    return build_engine(database_url or settings.database_url)


@click.group()
@click.version_option(version=__version__, prog_name="linkshelf")
def main():
    """linkshelf: personal link sharing service."""


@main.command("init-db")
@click.option("--database-url", envvar="LINKSHELF_DATABASE_URL", help="Override the database URL")
def init_db_cmd(database_url: Optional[str]):
    """Create all tables for the current schema."""
    from linkshelf.db.engine import init_db

    async def _go():
        engine = _engine(database_url)
        try:
            await init_db(engine)
        finally:
            await engine.dispose()

    _run(_go())
    click.secho("Database initialized", fg="green")


@main.command("create-user")
@click.argument("username")
@click.option("--password", help="Plain password, stored as a bcrypt hash")
@click.option("--password-hash", help="Precomputed credential hash, stored as-is")
@click.option("--database-url", envvar="LINKSHELF_DATABASE_URL", help="Override the database URL")
def create_user(
    username: str,
    password: Optional[str],
    password_hash: Optional[str],
    database_url: Optional[str],
):
    """Create an account directly in the database."""
    from sqlalchemy.ext.asyncio import AsyncSession

    from linkshelf.auth.password import hash_password
    from linkshelf.db.engine import init_db
    from linkshelf.errors import LinkshelfError
    from linkshelf.services.user_store import UserStore

    if (password is None) == (password_hash is None):
        click.secho("Error: pass exactly one of --password / --password-hash", fg="red", err=True)
        sys.exit(1)
    stored = password_hash if password_hash is not None else hash_password(password)

    async def _go() -> int:
        engine = _engine(database_url)
        try:
            await init_db(engine)
            async with AsyncSession(engine, expire_on_commit=False) as db:
                return await UserStore(db).create_user(username, stored)
        finally:
            await engine.dispose()

    try:
        user_id = _run(_go())
    except LinkshelfError as e:
        click.secho(f"Error: {e.message}", fg="red", err=True)
        sys.exit(1)
    click.secho(f"Created user {username} (id {user_id})", fg="green")


@main.command()
@click.option("--host", default=None, help="Bind address (default from settings)")
@click.option("--port", default=None, type=int, help="Port (default from settings)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API server with uvicorn."""
    import uvicorn

    from linkshelf.config import settings

    uvicorn.run(
        "linkshelf.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


if __name__ == "__main__":
    main()
