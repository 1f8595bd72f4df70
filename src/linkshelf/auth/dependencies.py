"""FastAPI auth dependencies: the session gate in front of protected routes.

require_session is attached at include_router level (see api/__init__.py),
so protected handlers never run without a valid session. The flow is:

    Cookie header → session_token value → SessionStore.resolve → username

A missing cookie, a cookie without the session pair, and an unknown or
revoked token all end in the same 401. Clients get no hint about which one
it was.
"""

from typing import Optional

import structlog
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from linkshelf.auth.sessions import SessionStore
from linkshelf.config import settings
from linkshelf.db.engine import get_db
from linkshelf.db.models import User
from linkshelf.errors import NotFound, Unauthorized
from linkshelf.services.user_store import UserStore

logger = structlog.get_logger()

UNAUTHORIZED_MESSAGE = "Authentication required"


class CurrentIdentity:
    """The authenticated session making the request."""

    def __init__(self, username: str, token: str):
        self.username = username
        self.token = token


def parse_session_token(
    cookie_header: Optional[str],
    cookie_name: str = settings.session_cookie_name,
) -> Optional[str]:
    """Pull the session token out of a raw Cookie header.

    Pairs are separated by ';'. The value is everything after the first '=',
    so values that contain '=' survive intact.
    """
    if not cookie_header:
        return None
    for pair in cookie_header.split(";"):
        key, sep, value = pair.strip().partition("=")
        if sep and key == cookie_name:
            return value
    return None


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.sessions


async def require_session(
    request: Request,
    sessions: SessionStore = Depends(get_session_store),
) -> CurrentIdentity:
    """Resolve the session cookie or reject the request with 401."""
    token = parse_session_token(
        request.headers.get("cookie"), settings.session_cookie_name
    )
    username = sessions.resolve(token) if token else None
    if username is None:
        logger.info("auth.rejected", path=request.url.path)
        raise Unauthorized(UNAUTHORIZED_MESSAGE)

    request.state.username = username
    return CurrentIdentity(username=username, token=token)


async def get_current_user(
    identity: CurrentIdentity = Depends(require_session),
    db: AsyncSession = Depends(get_db),
) -> User:
    """The User row behind the session. A deleted account counts as logged out."""
    try:
        return await UserStore(db).get_user_by_username(identity.username)
    except NotFound:
        raise Unauthorized(UNAUTHORIZED_MESSAGE)
