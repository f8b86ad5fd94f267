"""
tests.test_smoke

Minimal smoke tests to validate the gateway can boot and serve core endpoints.

Responsibilities:
- Ensure the FastAPI app starts, builds schemas, and the DB readiness probe works.
"""

from __future__ import annotations

import pytest
from support import running_client

from kube_gateway.api.app import create_app
from kube_gateway.schema.catalog import DEFAULT_KINDS
from kube_gateway.settings import Settings


@pytest.mark.asyncio
async def test_health_endpoints(settings: Settings) -> None:
    app = create_app(settings=settings)

    async with running_client(app) as client:
        r = await client.get("/healthz")
        assert r.status_code == 200
        assert r.json()["status"] == "ok"

        r = await client.get("/readyz")
        assert r.status_code == 200
        assert r.json() == {"status": "ready", "schemas": len(DEFAULT_KINDS)}
        assert r.headers["x-request-id"]


@pytest.mark.asyncio
async def test_dev_token_round_trip(settings: Settings) -> None:
    app = create_app(settings=settings)

    async with running_client(app) as client:
        r = await client.post(
            "/v1/dev/token", json={"name": "bob", "groups": ["system:masters"]}
        )
        assert r.status_code == 200
        token = r.json()["access_token"]

        r = await client.get("/v1/namespaces", headers={"Authorization": f"Bearer {token}"})
        assert r.status_code == 200
        assert r.json()["data"] == []


# --- Module Notes -----------------------------------------------------------
# Behavioral coverage of the extension points lives in the other test modules.
