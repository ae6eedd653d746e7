"""
Request ID middleware.

Every request gets an id (taken from an incoming X-Request-ID header or
generated), bound into structlog's contextvars with the method and path so
it appears on every event logged while the request is served, and echoed
back in the X-Request-ID response header.
"""

import secrets
from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger()


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or secrets.token_hex(8)
        request.state.request_id = request_id

        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            logger.debug("request_completed", status_code=response.status_code)
            return response
        finally:
            structlog.contextvars.unbind_contextvars("request_id", "method", "path")
