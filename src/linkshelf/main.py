"""FastAPI application factory.

create_app() returns a configured FastAPI instance with its own session
store on app.state. Lifespan creates the schema, runs the session sweeper
when sessions have a TTL, and disposes the engine on shutdown.

Every error leaves the app as an ApiResponse envelope: domain errors via
their business code, request validation failures as 400, unknown routes
as 404.
"""

import asyncio
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from linkshelf import __version__
from linkshelf.api import api_router
from linkshelf.auth.sessions import SessionStore, SessionSweeper
from linkshelf.config import settings
from linkshelf.errors import LinkshelfError
from linkshelf.schemas.envelope import ApiResponse, BizCode

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    logger.info(
        "linkshelf.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    from linkshelf.db.engine import engine, init_db
    await init_db(engine)

    sweeper = None
    sweep_task = None
    if settings.session_ttl_seconds is not None:
        sweeper = SessionSweeper(
            app.state.sessions, interval=settings.session_sweep_interval_seconds
        )
        sweep_task = asyncio.create_task(sweeper.run_loop())

    yield

    logger.info("linkshelf.shutdown")

    if sweeper is not None:
        sweeper.stop()
        sweep_task.cancel()
        try:
            await sweep_task
        except asyncio.CancelledError:
            pass

    await engine.dispose()


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(LinkshelfError)
    async def _domain_error(request: Request, exc: LinkshelfError):
        return ApiResponse.error(exc.biz_code, exc.message).to_response()

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        msg = errors[0].get("msg", BizCode.BAD_REQUEST.message) if errors else None
        return ApiResponse.error(BizCode.BAD_REQUEST, msg).to_response()

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        biz = BizCode.from_status(exc.status_code)
        return ApiResponse.error(biz, str(exc.detail) if exc.detail else None).to_response()


def create_app(session_store: SessionStore | None = None) -> FastAPI:
    """Build and return the FastAPI application."""
    app = FastAPI(
        title="linkshelf",
        description="Personal link sharing with cookie sessions and cached link groups",
        version=__version__,
        lifespan=lifespan,
    )
    if session_store is None:
        session_store = SessionStore(ttl_seconds=settings.session_ttl_seconds)
    app.state.sessions = session_store

    # Starlette runs middleware in reverse order of registration.
    # Request flow: RequestId → Security → CORS → handler
    from linkshelf.middleware.request_id import RequestIdMiddleware
    from linkshelf.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)

    _register_error_handlers(app)
    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: linkshelf.main:app)
app = create_app()
