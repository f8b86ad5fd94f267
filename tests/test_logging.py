"""
tests.test_logging

Logging processors and request-context middleware.
"""

from __future__ import annotations

import pytest
import structlog
from support import running_client

from kube_gateway.api.app import create_app
from kube_gateway.auth.models import Identity
from kube_gateway.observability.logging import _redact_credentials, bind_caller
from kube_gateway.settings import Settings


def test_credentials_are_redacted() -> None:
    event = _redact_credentials(None, "info", {"event": "x", "token": "abc", "user": "bob"})

    assert event == {"event": "x", "token": "[redacted]", "user": "bob"}


def test_bind_caller() -> None:
    structlog.contextvars.clear_contextvars()
    try:
        bind_caller(Identity(name="bob", uid="u-1"))
        assert structlog.contextvars.get_contextvars() == {"user": "bob", "uid": "u-1"}
    finally:
        structlog.contextvars.clear_contextvars()


@pytest.mark.asyncio
async def test_caller_request_id_is_echoed(settings: Settings) -> None:
    app = create_app(settings=settings)

    async with running_client(app) as client:
        r = await client.get("/healthz", headers={"x-request-id": "req-42"})

    assert r.headers["x-request-id"] == "req-42"
