"""
kube_gateway.store.base

Store contract and the forwarding decorator base.

Responsibilities:
- Define `Store`, the per-kind capability set (create/get/list/update/delete/watch).
- Define `StoreDecorator`, which forwards every operation to an inner store so
  subclasses only override what they customize.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Callable

from kube_gateway.types import APIObject, APIObjectList, APIRequest, APISchema, WatchEvent


class Store(ABC):
    """
    CRUD capability set for one resource kind.

    `id` is `namespace/name` for namespaced kinds and `name` otherwise.
    `update` also serves patch requests; stores inspect `api_op.verb`.
    """

    @abstractmethod
    async def create(self, api_op: APIRequest, schema: APISchema, data: APIObject) -> APIObject: ...

    @abstractmethod
    async def get(self, api_op: APIRequest, schema: APISchema, id: str) -> APIObject: ...

    @abstractmethod
    async def list(self, api_op: APIRequest, schema: APISchema) -> APIObjectList: ...

    @abstractmethod
    async def update(
        self, api_op: APIRequest, schema: APISchema, data: APIObject, id: str
    ) -> APIObject: ...

    @abstractmethod
    async def delete(self, api_op: APIRequest, schema: APISchema, id: str) -> APIObject: ...

    @abstractmethod
    def watch(self, api_op: APIRequest, schema: APISchema) -> AsyncIterator[WatchEvent]: ...


StoreFactory = Callable[[Store], Store]


class StoreDecorator(Store):
    """
    Wraps exactly one inner store.

    Every operation is forwarded explicitly with identical arguments and the
    inner result (or error) is returned unmodified.
    """

    def __init__(self, inner: Store) -> None:
        self._inner = inner

    @property
    def inner(self) -> Store:
        return self._inner

    async def create(self, api_op: APIRequest, schema: APISchema, data: APIObject) -> APIObject:
        return await self._inner.create(api_op, schema, data)

    async def get(self, api_op: APIRequest, schema: APISchema, id: str) -> APIObject:
        return await self._inner.get(api_op, schema, id)

    async def list(self, api_op: APIRequest, schema: APISchema) -> APIObjectList:
        return await self._inner.list(api_op, schema)

    async def update(
        self, api_op: APIRequest, schema: APISchema, data: APIObject, id: str
    ) -> APIObject:
        return await self._inner.update(api_op, schema, data, id)

    async def delete(self, api_op: APIRequest, schema: APISchema, id: str) -> APIObject:
        return await self._inner.delete(api_op, schema, id)

    def watch(self, api_op: APIRequest, schema: APISchema) -> AsyncIterator[WatchEvent]:
        return self._inner.watch(api_op, schema)


# --- Module Notes -----------------------------------------------------------
# Decorators are composed by `schema.registry.TemplateRegistry.resolve`; the
# innermost store is the default `store.sql.SqlResourceStore`.
