"""
kube_gateway.auth.authenticator

Pluggable identity providers.

Responsibilities:
- Define the `Authenticator` contract: request -> Identity | None, raising
  `AuthenticationError` when the credential backend itself fails.
- Adapt plain callables to the contract (`AuthenticatorFunc`).
- Provide concrete providers: bearer JWT, remote TokenReview, static (dev).
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from typing import Any, Protocol, runtime_checkable

import httpx
from fastapi.security.utils import get_authorization_scheme_param
from starlette.requests import Request

from kube_gateway.auth.jwt import (
    JwtConfig,
    JwtValidationError,
    decode_and_validate,
    identity_from_claims,
)
from kube_gateway.auth.models import Identity
from kube_gateway.errors import AuthenticationError
from kube_gateway.observability.logging import get_logger
from kube_gateway.settings import Settings

log = get_logger(__name__)

AuthFunc = Callable[[Request], "Identity | None | Awaitable[Identity | None]"]


@runtime_checkable
class Authenticator(Protocol):
    async def authenticate(self, request: Request) -> Identity | None:
        """
        Return the caller identity, or None when no valid credentials are present.

        Raise `AuthenticationError` only when the credential backend is broken.
        """
        ...


class AuthenticatorFunc:
    """
    Adapter so a plain function (sync or async) can serve as an `Authenticator`.
    """

    def __init__(self, func: AuthFunc) -> None:
        self._func = func

    async def authenticate(self, request: Request) -> Identity | None:
        result = self._func(request)
        if inspect.isawaitable(result):
            result = await result
        return result


def bearer_token(request: Request) -> str | None:
    scheme, credentials = get_authorization_scheme_param(request.headers.get("authorization"))
    if scheme.lower() != "bearer" or not credentials:
        return None
    return credentials


class JwtAuthenticator:
    def __init__(self, cfg: JwtConfig) -> None:
        self._cfg = cfg

    async def authenticate(self, request: Request) -> Identity | None:
        token = bearer_token(request)
        if token is None:
            return None
        try:
            payload = decode_and_validate(cfg=self._cfg, token=token)
            return identity_from_claims(payload)
        except JwtValidationError as e:
            # Bad credentials are "unauthenticated", not a server error.
            log.info("auth.jwt_rejected", reason=str(e))
            return None


class TokenReviewAuthenticator:
    """
    Delegates token validation to a remote Kubernetes-style TokenReview endpoint.
    """

    def __init__(self, *, url: str, http: httpx.AsyncClient) -> None:
        self._url = url
        self._http = http

    async def authenticate(self, request: Request) -> Identity | None:
        token = bearer_token(request)
        if token is None:
            return None

        body = {
            "apiVersion": "authentication.k8s.io/v1",
            "kind": "TokenReview",
            "spec": {"token": token},
        }
        try:
            r = await self._http.post(self._url, json=body)
            r.raise_for_status()
            review: dict[str, Any] = r.json()
        except (httpx.HTTPError, ValueError) as e:
            log.error("auth.token_review_failed", url=self._url, error=str(e))
            raise AuthenticationError(f"Token review failed: {e}") from e

        status = review.get("status") or {}
        if not status.get("authenticated"):
            return None
        user = status.get("user") or {}
        name = str(user.get("username", ""))
        if not name:
            return None
        return Identity(
            name=name,
            uid=str(user.get("uid") or name),
            groups=frozenset(str(g) for g in user.get("groups") or []),
        )


class StaticAuthenticator:
    # Dev-only: every request is the same caller.
    def __init__(self, identity: Identity) -> None:
        self._identity = identity

    async def authenticate(self, request: Request) -> Identity | None:
        return self._identity


def build_authenticator(settings: Settings, *, http: httpx.AsyncClient | None = None) -> Authenticator:
    if settings.auth_mode == "static":
        if settings.env == "prod":
            raise ValueError("Static authentication is not allowed in prod")
        return StaticAuthenticator(
            Identity(
                name=settings.static_user_name,
                uid=settings.static_user_uid,
                groups=frozenset(settings.static_user_groups),
            )
        )
    if settings.auth_mode == "token_review":
        if not settings.token_review_url:
            raise ValueError("KGW_TOKEN_REVIEW_URL is required for token_review auth")
        return TokenReviewAuthenticator(
            url=settings.token_review_url,
            http=http or httpx.AsyncClient(timeout=settings.token_review_timeout_seconds),
        )
    return JwtAuthenticator(JwtConfig.from_settings(settings))


# --- Module Notes -----------------------------------------------------------
# Providers are mounted by `auth.middleware.AuthMiddleware`; any object with an async
# `authenticate(request)` method can be passed to `create_app(authenticator=...)`.
