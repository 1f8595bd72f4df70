"""Per-request correlation IDs.

A client may pass its own X-Request-ID (up to 128 printable characters);
anything else is replaced with a fresh hex UUID. The ID, the method and the
path are bound to structlog's contextvars for the lifetime of the request,
and the ID is returned in the X-Request-ID response header.
"""

import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 128


def _client_request_id(request: Request) -> str | None:
    value = request.headers.get(REQUEST_ID_HEADER)
    if value and len(value) <= MAX_REQUEST_ID_LENGTH and value.isprintable():
        return value
    return None


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag each request and its log lines with a request ID."""

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = _client_request_id(request) or uuid.uuid4().hex

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        response: Response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
