"""
kube_gateway.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Provide liveness probe (`/healthz`).
- Provide readiness probe (`/readyz`) checking the DB and that schemas are built.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kube_gateway.api.deps import schemas_dep, sessionmaker_from_app
from kube_gateway.schema.factory import SchemaCollection

router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
    schemas: SchemaCollection = Depends(schemas_dep),
) -> dict[str, str | int]:
    async with session_factory() as session:
        await session.execute(text("SELECT 1"))
    return {"status": "ready", "schemas": len(schemas)}
