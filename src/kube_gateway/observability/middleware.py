"""
kube_gateway.observability.middleware

Outermost HTTP middleware: request ids and access logging.

Responsibilities:
- Accept a caller-supplied `x-request-id` or mint one, and echo it on the response.
- Bind request metadata into structlog contextvars for the lifetime of the request.
- Emit one `http.request` event per request with status and latency.
"""

from __future__ import annotations

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from kube_gateway.observability.logging import get_logger

log = get_logger(__name__)

REQUEST_ID_HEADER = "x-request-id"


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        started = time.perf_counter()
        try:
            response: Response = await call_next(request)
            log.info(
                "http.request",
                status=response.status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
        finally:
            # Contextvars outlive the task under some servers; never leak them to the next request.
            structlog.contextvars.clear_contextvars()

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
