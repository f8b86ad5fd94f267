"""
kube_gateway.db.init_db

Schema bootstrap for dev and test databases. Production runs Alembic instead.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine

from kube_gateway.db.models import Base
from kube_gateway.observability.logging import get_logger

log = get_logger(__name__)


async def init_db(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    log.info("db.initialized", tables=sorted(Base.metadata.tables))
