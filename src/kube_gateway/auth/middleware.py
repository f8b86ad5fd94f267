"""
kube_gateway.auth.middleware

Authentication middleware.

Responsibilities:
- Run the configured identity provider once per request, ahead of dispatch.
- Attach the resulting identity (or None) to `request.state.identity`.
- Turn identity backend failures into 503 responses.
"""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.status import HTTP_503_SERVICE_UNAVAILABLE
from starlette.types import ASGIApp

from kube_gateway.auth.authenticator import Authenticator
from kube_gateway.errors import AuthenticationError
from kube_gateway.observability.logging import bind_caller, get_logger

log = get_logger(__name__)


class AuthMiddleware(BaseHTTPMiddleware):
    """
    - Unauthenticated requests continue with `identity = None`; the dispatcher rejects them.
    - Backend errors stop the request here; they are never downgraded to "anonymous".
    """

    def __init__(self, app: ASGIApp, authenticator: Authenticator) -> None:
        super().__init__(app)
        self._authenticator = authenticator

    async def dispatch(self, request: Request, call_next) -> Response:
        try:
            identity = await self._authenticator.authenticate(request)
        except AuthenticationError as e:
            log.error("auth.backend_error", error=str(e))
            return _unavailable(str(e))
        except Exception:
            # Any other provider failure is still a broken backend, not an anonymous caller.
            log.exception("auth.provider_crashed")
            return _unavailable("Identity provider failed")

        request.state.identity = identity
        bind_caller(identity)
        return await call_next(request)


def _unavailable(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "type": "error",
            "status": HTTP_503_SERVICE_UNAVAILABLE,
            "code": "AuthenticationUnavailable",
            "message": message,
        },
    )


# --- Module Notes -----------------------------------------------------------
# Registered in `api.app.create_app` inside `RequestContextMiddleware`, so auth log
# lines already carry the request id.
