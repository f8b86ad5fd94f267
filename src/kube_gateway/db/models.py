"""
kube_gateway.db.models

Persistence schema for the default generic resource store.

Responsibilities:
- Define the declarative base shared by ORM models.
- Define `Resource`: one stored object of any kind, kept as a JSON document and
  addressed by (group, kind, namespace, name).
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Integer, String, UniqueConstraint, Uuid as SAUuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


def _utcnow() -> datetime:
    # Persist naive UTC timestamps for simplicity.
    return datetime.utcnow()


class Resource(Base):
    __tablename__ = "resources"
    __table_args__ = (
        UniqueConstraint("group", "kind", "namespace", "name", name="uq_resources_identity"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )

    group: Mapped[str] = mapped_column(String(253), nullable=False, default="")
    kind: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    # Empty string for cluster-scoped kinds.
    namespace: Mapped[str] = mapped_column(String(253), nullable=False, default="")
    name: Mapped[str] = mapped_column(String(253), nullable=False)

    uid: Mapped[str] = mapped_column(String(36), nullable=False)
    resource_version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    # Full object document (apiVersion/kind/metadata/payload).
    document: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)
