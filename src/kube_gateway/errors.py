"""
kube_gateway.errors

Error taxonomy shared by the dispatcher, stores, and access control.

Responsibilities:
- Define request-scoped API errors with their HTTP status and error code.
- Define startup configuration errors raised by the template registry.
- Define the authentication backend error raised by identity providers.
"""

from __future__ import annotations


class APIError(Exception):
    """
    Request-scoped error rendered to the caller as a JSON error body.
    """

    status_code: int = 500
    code: str = "ServerError"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.code)
        self.message = message or self.code

    def to_body(self) -> dict[str, object]:
        return {
            "type": "error",
            "status": self.status_code,
            "code": self.code,
            "message": self.message,
        }


class UnauthenticatedError(APIError):
    status_code = 401
    code = "Unauthorized"


class PermissionDeniedError(APIError):
    status_code = 403
    code = "PermissionDenied"


class NotFoundError(APIError):
    status_code = 404
    code = "NotFound"


class MethodNotAllowedError(APIError):
    status_code = 405
    code = "MethodNotAllowed"


class ConflictError(APIError):
    status_code = 409
    code = "Conflict"


class InvalidBodyError(APIError):
    status_code = 422
    code = "InvalidBodyContent"


class RequestCancelledError(APIError):
    # 499 mirrors the nginx "client closed request" convention.
    status_code = 499
    code = "RequestCancelled"


class AuthenticationError(Exception):
    """
    The credential backend itself failed; never treated as "unauthenticated".
    """


class TemplateConflictError(Exception):
    pass


class RegistryFrozenError(RuntimeError):
    pass


# --- Module Notes -----------------------------------------------------------
# Stores and decorators raise APIError subclasses only; the dispatcher maps them
# to HTTP responses in `api.app`.
