"""
tests.support

Test doubles (store, access control, request) and app/client helpers.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx
from fastapi import FastAPI

from kube_gateway.auth.jwt import JwtConfig, issue_token
from kube_gateway.errors import PermissionDeniedError
from kube_gateway.settings import Settings
from kube_gateway.store.base import Store
from kube_gateway.types import APIObject, APIObjectList, APIRequest, APISchema, Verb, WatchEvent


class RecordingStore(Store):
    """
    Returns canned results and counts calls; `fail_with` makes every call raise.
    """

    def __init__(self, *, fail_with: Exception | None = None) -> None:
        self.calls: Counter[str] = Counter()
        self.args: list[tuple[str, tuple[Any, ...]]] = []
        self.fail_with = fail_with
        self.result = APIObject(type="configmaps", id="default/cm", object={"data": {"k": "v"}})
        self.list_result = APIObjectList(type="configmaps", objects=[self.result])
        self.events = [WatchEvent(name="ADDED", object=self.result)]

    def _record(self, op: str, *args: Any) -> None:
        self.calls[op] += 1
        self.args.append((op, args))
        if self.fail_with is not None:
            raise self.fail_with

    async def create(self, api_op: APIRequest, schema: APISchema, data: APIObject) -> APIObject:
        self._record("create", api_op, schema, data)
        return self.result

    async def get(self, api_op: APIRequest, schema: APISchema, id: str) -> APIObject:
        self._record("get", api_op, schema, id)
        return self.result

    async def list(self, api_op: APIRequest, schema: APISchema) -> APIObjectList:
        self._record("list", api_op, schema)
        return self.list_result

    async def update(
        self, api_op: APIRequest, schema: APISchema, data: APIObject, id: str
    ) -> APIObject:
        self._record("update", api_op, schema, data, id)
        return self.result

    async def delete(self, api_op: APIRequest, schema: APISchema, id: str) -> APIObject:
        self._record("delete", api_op, schema, id)
        return self.result

    def watch(self, api_op: APIRequest, schema: APISchema) -> AsyncIterator[WatchEvent]:
        self._record("watch", api_op, schema)
        return self._events()

    async def _events(self) -> AsyncIterator[WatchEvent]:
        for event in self.events:
            yield event


class StubAccessControl:
    """
    Allows everything except the (resource, verb) pairs listed in `deny`.
    """

    def __init__(self, *, deny: set[tuple[str, str]] | None = None) -> None:
        self.deny = deny or set()
        self.calls: list[tuple[str, str, str, str]] = []
        self.denial: PermissionDeniedError | None = None

    async def can_do(
        self,
        api_op: APIRequest,
        resource: str,
        verb: Verb | str,
        namespace: str = "",
        name: str = "",
    ) -> None:
        self.calls.append((resource, str(verb), namespace, name))
        if (resource, str(verb)) in self.deny:
            self.denial = PermissionDeniedError(f"cannot {verb} {resource}")
            raise self.denial


class DisconnectedRequest:
    async def is_disconnected(self) -> bool:
        return True


def bearer(settings: Settings, name: str, groups: list[str]) -> dict[str, str]:
    token = issue_token(cfg=JwtConfig.from_settings(settings), subject=name, groups=groups)
    return {"Authorization": f"Bearer {token}"}


@asynccontextmanager
async def running_client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    # httpx ASGITransport does not manage lifespan automatically; do it explicitly.
    async with app.router.lifespan_context(app):
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
