"""
kube_gateway.auth.deps

FastAPI dependency functions for authentication.

Responsibilities:
- Expose the identity established by `AuthMiddleware` to endpoints.
- Reject unauthenticated callers with 401.
"""

from __future__ import annotations

from fastapi import Request

from kube_gateway.auth.models import Identity
from kube_gateway.errors import UnauthenticatedError


def optional_identity(request: Request) -> Identity | None:
    return getattr(request.state, "identity", None)


def get_identity(request: Request) -> Identity:
    identity = optional_identity(request)
    if identity is None:
        raise UnauthenticatedError("Authentication required")
    return identity


# --- Module Notes -----------------------------------------------------------
# Resource endpoints use `get_identity`; health probes stay anonymous.
