from __future__ import annotations

from pathlib import Path

import pytest

from kube_gateway.settings import Settings
from kube_gateway.types import DEFAULT_VERBS, APISchema


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    # File-backed SQLite: every connection in the async pool sees the same DB.
    return Settings(
        env="test",
        log_level="WARNING",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
    )


@pytest.fixture
def configmap_schema() -> APISchema:
    return APISchema(
        id="configmaps",
        group="",
        version="v1",
        kind="ConfigMap",
        plural="configmaps",
        namespaced=True,
        allowed_verbs=DEFAULT_VERBS,
    )
