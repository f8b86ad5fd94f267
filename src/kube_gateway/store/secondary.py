"""
kube_gateway.store.secondary

Store decorator enforcing a permission on another resource kind.

Responsibilities:
- Before selected operations, ask the access control oracle whether the caller
  may perform a verb on a different resource (kind-level check).
- Abort without touching the inner store when denied.
"""

from __future__ import annotations

from collections.abc import Iterable

from kube_gateway.store.base import Store, StoreDecorator, StoreFactory
from kube_gateway.types import APIObject, APIRequest, APISchema, Verb


class SecondaryCheckStore(StoreDecorator):
    """
    Example: a ConfigMap store that only lets callers create ConfigMaps when they
    may also create Secrets.
    """

    def __init__(
        self,
        inner: Store,
        *,
        resource: str,
        verb: Verb,
        guarded: Iterable[Verb] = (Verb.create,),
    ) -> None:
        super().__init__(inner)
        self._resource = resource
        self._verb = verb
        self._guarded = frozenset(guarded)

    async def _check(self, api_op: APIRequest) -> None:
        # Kind-level check: empty namespace and name.
        await api_op.access_control.can_do(api_op, self._resource, self._verb, "", "")
        # The permission is settled; don't start a write for a client that already left.
        await api_op.ensure_active()

    async def create(self, api_op: APIRequest, schema: APISchema, data: APIObject) -> APIObject:
        if Verb.create in self._guarded:
            await self._check(api_op)
        return await self._inner.create(api_op, schema, data)

    async def update(
        self, api_op: APIRequest, schema: APISchema, data: APIObject, id: str
    ) -> APIObject:
        # Patch requests arrive through update as well.
        if api_op.verb in self._guarded or Verb.update in self._guarded:
            await self._check(api_op)
        return await self._inner.update(api_op, schema, data, id)

    async def delete(self, api_op: APIRequest, schema: APISchema, id: str) -> APIObject:
        if Verb.delete in self._guarded:
            await self._check(api_op)
        return await self._inner.delete(api_op, schema, id)


def require_permission(
    resource: str, verb: Verb, *, guarded: Iterable[Verb] = (Verb.create,)
) -> StoreFactory:
    guarded = tuple(guarded)

    def factory(store: Store) -> Store:
        return SecondaryCheckStore(store, resource=resource, verb=verb, guarded=guarded)

    return factory
