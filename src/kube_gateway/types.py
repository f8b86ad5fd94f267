"""
kube_gateway.types

Core request/schema/object types shared by every layer.

Responsibilities:
- Define the verb vocabulary and the HTTP method -> verb mapping.
- Define `APISchema` (per-kind schema with its allowed verbs and store).
- Define `APIRequest` (request context passed to stores and access control).
- Define `APIObject` / `APIObjectList` / `WatchEvent` payload containers.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from starlette.requests import Request

from kube_gateway.errors import RequestCancelledError

if TYPE_CHECKING:
    from kube_gateway.access.control import AccessControl
    from kube_gateway.auth.models import Identity
    from kube_gateway.store.base import Store


class Verb(enum.StrEnum):
    # Kubernetes-style verbs; values are what access rules and templates refer to.
    get = "get"
    list = "list"
    create = "create"
    update = "update"
    patch = "patch"
    delete = "delete"
    watch = "watch"


_METHOD_VERBS: dict[str, frozenset[Verb]] = {
    "GET": frozenset({Verb.get, Verb.list, Verb.watch}),
    "POST": frozenset({Verb.create}),
    "PUT": frozenset({Verb.update}),
    "PATCH": frozenset({Verb.patch}),
    "DELETE": frozenset({Verb.delete}),
}

# Verbs served by the default dispatcher; watch needs explicit opt-in by a store.
DEFAULT_VERBS: frozenset[Verb] = frozenset(Verb) - {Verb.watch}


def parse_verbs(methods: Iterable[str | Verb]) -> frozenset[Verb]:
    """
    Normalize HTTP method names and verb names into a verb set.

    `GET` covers get/list/watch so that blocking GET blocks every read path.
    """

    verbs: set[Verb] = set()
    for method in methods:
        if isinstance(method, Verb):
            verbs.add(method)
            continue
        # Upper-case names are HTTP methods ("GET"); lower-case names are verbs ("get").
        if method in _METHOD_VERBS:
            verbs |= _METHOD_VERBS[method]
            continue
        try:
            verbs.add(Verb(method))
        except ValueError as e:
            raise ValueError(f"Unknown method or verb: {method!r}") from e
    return frozenset(verbs)


@dataclass(slots=True)
class APIObject:
    type: str
    id: str
    object: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "id": self.id, **self.object}


@dataclass(slots=True)
class APIObjectList:
    type: str
    objects: list[APIObject] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "collection",
            "resourceType": self.type,
            "data": [o.to_dict() for o in self.objects],
        }


@dataclass(frozen=True, slots=True)
class WatchEvent:
    # ADDED / MODIFIED / DELETED, as in Kubernetes watch streams.
    name: str
    object: APIObject


@dataclass(slots=True)
class APISchema:
    """
    Live schema for one resource kind.

    Mutable only while the schema factory is building it; the collection hands
    out the finished instances and never changes them again.
    """

    id: str
    group: str
    version: str
    kind: str
    plural: str
    namespaced: bool
    allowed_verbs: frozenset[Verb]
    store: Store | None = None

    def allows(self, verb: Verb) -> bool:
        return verb in self.allowed_verbs

    def copy(self) -> APISchema:
        return replace(self)


@dataclass(slots=True)
class APIRequest:
    """
    Request context handed to stores and to the access control oracle.
    """

    identity: Identity | None
    access_control: AccessControl
    verb: Verb
    schema: APISchema
    namespace: str = ""
    name: str = ""
    request: Request | None = None

    async def ensure_active(self) -> None:
        # Stores call this right before mutating so a dropped client does not cause a write.
        if self.request is not None and await self.request.is_disconnected():
            raise RequestCancelledError("Client disconnected before the operation completed")


# --- Module Notes -----------------------------------------------------------
# Schema ids double as resource names (`<plural>` or `<plural>.<group>`), so the
# same string appears in URLs and in access rules.
