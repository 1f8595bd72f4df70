"""Auth API: registration, login/logout and account management.

- POST /auth/register → create an account
- POST /auth/login → username/password → session cookie
- POST /auth/logout → revoke the session and clear the cookie
- GET /auth/me → current user
- PUT /auth/password → change password
- DELETE /auth/me → delete the account (groups and links cascade)

Register, login and logout are open. The rest go through the session gate
per route.
"""

import structlog
from fastapi import APIRouter, Depends, Request, Response
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from linkshelf.auth.dependencies import (
    CurrentIdentity,
    get_current_user,
    get_session_store,
    parse_session_token,
    require_session,
)
from linkshelf.auth.password import hash_password, verify_password
from linkshelf.auth.sessions import SessionStore
from linkshelf.config import settings
from linkshelf.db.engine import get_db
from linkshelf.db.models import User
from linkshelf.errors import NotFound, Unauthorized, ValidationError
from linkshelf.schemas.auth import (
    LoginData,
    LoginRequest,
    PasswordChange,
    RegisterRequest,
    UserRead,
)
from linkshelf.schemas.envelope import ApiResponse
from linkshelf.services.user_store import UserStore

logger = structlog.get_logger()

router = APIRouter(prefix="/auth")

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def _clear_session_cookie(response: Response) -> None:
    response.delete_cookie(settings.session_cookie_name, path="/")


# ─── Register ────────────────────────────────────────────


@router.post("/register", response_model=ApiResponse[UserRead])
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)):
    """Create a new account. Taken usernames are rejected."""
    store = UserStore(db)
    user_id = await store.create_user(body.username, hash_password(body.password))
    user = await store.get_user_by_id(user_id)
    logger.info("auth.registered", user_id=user_id, username=body.username)
    return ApiResponse.success(UserRead.model_validate(user))


# ─── Login / logout ──────────────────────────────────────


async def login_credentials(request: Request) -> LoginRequest:
    """Read login fields from a JSON body or an HTML form post."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(FORM_CONTENT_TYPES):
        data = dict(await request.form())
    else:
        try:
            data = await request.json()
        except ValueError:
            raise ValidationError("Malformed request body")
    try:
        return LoginRequest.model_validate(data)
    except PydanticValidationError as e:
        errors = e.errors()
        raise ValidationError(errors[0]["msg"] if errors else None)


@router.post("/login", response_model=ApiResponse[LoginData])
async def login(
    response: Response,
    body: LoginRequest = Depends(login_credentials),
    db: AsyncSession = Depends(get_db),
    sessions: SessionStore = Depends(get_session_store),
):
    """Check credentials and issue a session cookie."""
    try:
        user = await UserStore(db).get_user_by_username(body.username)
    except NotFound:
        user = None

    if user is None or not verify_password(body.password, user.password_hash):
        logger.info("auth.login_failed", username=body.username)
        raise Unauthorized("Invalid credentials")

    token = sessions.create_session(user.username)
    response.set_cookie(
        settings.session_cookie_name,
        token,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )
    return ApiResponse.success(LoginData(username=user.username, token=token))


@router.post("/logout", response_model=ApiResponse[None])
async def logout(
    request: Request,
    response: Response,
    sessions: SessionStore = Depends(get_session_store),
):
    """Revoke the cookie's session (if any) and tell the client to drop it."""
    token = parse_session_token(
        request.headers.get("cookie"), settings.session_cookie_name
    )
    if token:
        sessions.revoke(token)
    _clear_session_cookie(response)
    return ApiResponse.success(msg="Logged out")


# ─── Current user ───────────────────────────────────────


@router.get("/me", response_model=ApiResponse[UserRead])
async def get_me(user: User = Depends(get_current_user)):
    return ApiResponse.success(UserRead.model_validate(user))


@router.put("/password", response_model=ApiResponse[None])
async def change_password(
    body: PasswordChange,
    identity: CurrentIdentity = Depends(require_session),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    sessions: SessionStore = Depends(get_session_store),
):
    """Change the password and end every other session of the account."""
    if not verify_password(body.old_password, user.password_hash):
        raise Unauthorized("Invalid credentials")
    await UserStore(db).update_user_password(user.id, hash_password(body.new_password))
    sessions.revoke_user(user.username, keep=identity.token)
    logger.info("auth.password_changed", user_id=user.id)
    return ApiResponse.success(msg="Password updated")


@router.delete("/me", response_model=ApiResponse[None])
async def delete_me(
    response: Response,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    sessions: SessionStore = Depends(get_session_store),
):
    """Delete the account and end every session it had."""
    await UserStore(db).delete_user(user.id)
    sessions.revoke_user(user.username)
    _clear_session_cookie(response)
    logger.info("auth.account_deleted", user_id=user.id)
    return ApiResponse.success(msg="Account deleted")
