"""
kube_gateway.db.repositories.resources

Repository for `Resource` rows.

Responsibilities:
- Insert, fetch, list, update, and delete stored objects of a given kind.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from kube_gateway.db.models import Resource


class ResourceRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        group: str,
        kind: str,
        namespace: str,
        name: str,
        document: dict[str, Any],
    ) -> Resource:
        row = Resource(
            group=group,
            kind=kind,
            namespace=namespace,
            name=name,
            uid=str(uuid.uuid4()),
            resource_version=1,
            document=document,
        )
        self._session.add(row)
        await self._session.flush()
        return row

    async def get(self, *, group: str, kind: str, namespace: str, name: str) -> Resource | None:
        stmt = select(Resource).where(
            Resource.group == group,
            Resource.kind == kind,
            Resource.namespace == namespace,
            Resource.name == name,
        )
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def list(self, *, group: str, kind: str, namespace: str | None = None) -> list[Resource]:
        stmt = select(Resource).where(Resource.group == group, Resource.kind == kind)
        if namespace:
            stmt = stmt.where(Resource.namespace == namespace)
        stmt = stmt.order_by(Resource.namespace, Resource.name)
        return list((await self._session.execute(stmt)).scalars().all())

    async def replace_document(self, row: Resource, document: dict[str, Any]) -> Resource:
        row.document = document
        row.resource_version += 1
        row.updated_at = datetime.utcnow()
        await self._session.flush()
        return row

    async def delete(self, row: Resource) -> None:
        await self._session.delete(row)
        await self._session.flush()


# --- Module Notes -----------------------------------------------------------
# (group, kind, namespace, name) is unique; duplicate inserts surface as IntegrityError.
