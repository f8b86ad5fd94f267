"""
kube_gateway.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Expose the resolved schema collection and access control oracle from app.state.
"""

from __future__ import annotations

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kube_gateway.access.control import AccessControl
from kube_gateway.schema.factory import SchemaCollection


def schemas_dep(request: Request) -> SchemaCollection:
    # Built once during startup in `kube_gateway.api.app.create_app`.
    return request.app.state.schemas  # type: ignore[attr-defined]


def access_control_dep(request: Request) -> AccessControl:
    return request.app.state.access_control  # type: ignore[attr-defined]


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    return request.app.state.sessionmaker  # type: ignore[attr-defined]
