"""
tests.test_authenticator

Identity providers: JWT, TokenReview, static, and the function adapter.
"""

from __future__ import annotations

import json
from datetime import timedelta

import httpx
import pytest
from starlette.requests import Request

from kube_gateway.auth.authenticator import (
    Authenticator,
    AuthenticatorFunc,
    JwtAuthenticator,
    StaticAuthenticator,
    TokenReviewAuthenticator,
    build_authenticator,
)
from kube_gateway.auth.jwt import JwtConfig, issue_token
from kube_gateway.auth.models import Identity
from kube_gateway.errors import AuthenticationError
from kube_gateway.settings import Settings


def _request(authorization: str | None = None) -> Request:
    headers = [] if authorization is None else [(b"authorization", authorization.encode())]
    return Request({"type": "http", "method": "GET", "path": "/", "headers": headers})


def _cfg() -> JwtConfig:
    return JwtConfig.from_settings(Settings(env="test"))


@pytest.mark.asyncio
async def test_jwt_identity_is_deterministic() -> None:
    cfg = _cfg()
    token = issue_token(cfg=cfg, subject="alice", uid="u-1", groups=["devs", "ops"])
    authn = JwtAuthenticator(cfg)

    first = await authn.authenticate(_request(f"Bearer {token}"))
    second = await authn.authenticate(_request(f"Bearer {token}"))

    assert first == Identity(name="alice", uid="u-1", groups=frozenset({"devs", "ops"}))
    assert first == second


@pytest.mark.asyncio
async def test_jwt_uid_defaults_to_subject() -> None:
    cfg = _cfg()
    token = issue_token(cfg=cfg, subject="alice", groups=[])

    identity = await JwtAuthenticator(cfg).authenticate(_request(f"Bearer {token}"))

    assert identity is not None
    assert identity.uid == "alice"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "authorization",
    [None, "", "Basic YWxpY2U6cHc=", "Bearer not-a-jwt"],
)
async def test_jwt_missing_or_malformed_credentials_are_unauthenticated(
    authorization: str | None,
) -> None:
    assert await JwtAuthenticator(_cfg()).authenticate(_request(authorization)) is None


@pytest.mark.asyncio
async def test_jwt_expired_token_is_unauthenticated() -> None:
    cfg = _cfg()
    token = issue_token(cfg=cfg, subject="alice", groups=[], ttl=timedelta(seconds=-60))

    assert await JwtAuthenticator(cfg).authenticate(_request(f"Bearer {token}")) is None


@pytest.mark.asyncio
async def test_jwt_wrong_secret_is_unauthenticated() -> None:
    other = JwtConfig(alg="HS256", issuer="kube-gateway", audience="kube-gateway-api", secret="x")
    token = issue_token(cfg=other, subject="alice", groups=[])

    assert await JwtAuthenticator(_cfg()).authenticate(_request(f"Bearer {token}")) is None


def _token_review(handler) -> TokenReviewAuthenticator:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return TokenReviewAuthenticator(url="http://review.test/tokenreviews", http=http)


@pytest.mark.asyncio
async def test_token_review_authenticated_user() -> None:
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return httpx.Response(
            200,
            json={
                "status": {
                    "authenticated": True,
                    "user": {"username": "bob", "uid": "42", "groups": ["system:masters"]},
                }
            },
        )

    identity = await _token_review(handler).authenticate(_request("Bearer tok"))

    assert identity == Identity(name="bob", uid="42", groups=frozenset({"system:masters"}))
    assert seen[0]["spec"] == {"token": "tok"}


@pytest.mark.asyncio
async def test_token_review_rejection_is_unauthenticated() -> None:
    authn = _token_review(lambda _: httpx.Response(200, json={"status": {"authenticated": False}}))

    assert await authn.authenticate(_request("Bearer tok")) is None


@pytest.mark.asyncio
async def test_token_review_without_token_skips_backend() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        raise AssertionError("backend must not be called")

    assert await _token_review(handler).authenticate(_request()) is None


@pytest.mark.asyncio
async def test_token_review_backend_failure_is_an_error() -> None:
    authn = _token_review(lambda _: httpx.Response(500, text="boom"))

    with pytest.raises(AuthenticationError):
        await authn.authenticate(_request("Bearer tok"))


@pytest.mark.asyncio
async def test_token_review_transport_failure_is_an_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(AuthenticationError):
        await _token_review(handler).authenticate(_request("Bearer tok"))


@pytest.mark.asyncio
async def test_authenticator_func_accepts_sync_and_async_callables() -> None:
    bob = Identity(name="bob", uid="bob", groups=frozenset({"system:masters"}))

    async def async_auth(_: Request) -> Identity | None:
        return bob

    sync_authn = AuthenticatorFunc(lambda _: bob)
    async_authn = AuthenticatorFunc(async_auth)

    assert isinstance(sync_authn, Authenticator)
    assert await sync_authn.authenticate(_request()) is bob
    assert await async_authn.authenticate(_request()) is bob


def test_build_authenticator_from_settings() -> None:
    assert isinstance(build_authenticator(Settings(env="test")), JwtAuthenticator)
    assert isinstance(
        build_authenticator(Settings(env="dev", auth_mode="static")), StaticAuthenticator
    )
    with pytest.raises(ValueError):
        build_authenticator(Settings(env="prod", auth_mode="static"))
    with pytest.raises(ValueError):
        build_authenticator(Settings(env="test", auth_mode="token_review"))


@pytest.mark.asyncio
async def test_static_authenticator_defaults_to_cluster_admin() -> None:
    authn = build_authenticator(Settings(env="dev", auth_mode="static"))

    identity = await authn.authenticate(_request())

    assert identity == Identity(name="bob", uid="bob", groups=frozenset({"system:masters"}))
