"""
kube_gateway.store.sql

Default generic store backed by SQLAlchemy.

Responsibilities:
- Persist objects of any kind as JSON documents via `ResourceRepo`.
- Apply Kubernetes-style object semantics: names, namespaces, uid,
  resourceVersion optimistic concurrency, and JSON merge patch.
"""

from __future__ import annotations

import copy
from collections.abc import AsyncIterator
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kube_gateway.db.models import Resource
from kube_gateway.db.repositories.resources import ResourceRepo
from kube_gateway.errors import (
    ConflictError,
    InvalidBodyError,
    MethodNotAllowedError,
    NotFoundError,
)
from kube_gateway.observability.logging import get_logger
from kube_gateway.store.base import Store
from kube_gateway.types import APIObject, APIObjectList, APIRequest, APISchema, Verb, WatchEvent

log = get_logger(__name__)

DEFAULT_NAMESPACE = "default"

# Server-owned metadata; never persisted from client input.
_SYSTEM_METADATA = ("uid", "resourceVersion", "creationTimestamp")


class SqlResourceStore(Store):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def create(self, api_op: APIRequest, schema: APISchema, data: APIObject) -> APIObject:
        document = _clean_document(data.object)
        metadata = document["metadata"]
        name = metadata.get("name")
        if not isinstance(name, str) or not name:
            raise InvalidBodyError("metadata.name is required")
        namespace = _namespace_for(schema, api_op.namespace, metadata.get("namespace"))
        metadata["name"] = name
        _set_namespace(schema, metadata, namespace)

        await api_op.ensure_active()
        async with self._session_factory() as session, session.begin():
            repo = ResourceRepo(session)
            key = {"group": schema.group, "kind": schema.kind, "namespace": namespace, "name": name}
            if await repo.get(**key) is not None:
                raise ConflictError(f"{schema.kind} {_display(namespace, name)!r} already exists")
            try:
                row = await repo.create(**key, document=document)
            except IntegrityError as e:
                raise ConflictError(f"{schema.kind} {_display(namespace, name)!r} already exists") from e

        log.info("store.created", kind=schema.kind, namespace=namespace, name=name)
        return _to_api_object(schema, row)

    async def get(self, api_op: APIRequest, schema: APISchema, id: str) -> APIObject:
        namespace, name = _split_id(schema, id, api_op.namespace)
        async with self._session_factory() as session:
            row = await ResourceRepo(session).get(
                group=schema.group, kind=schema.kind, namespace=namespace, name=name
            )
        if row is None:
            raise NotFoundError(f"{schema.kind} {_display(namespace, name)!r} not found")
        return _to_api_object(schema, row)

    async def list(self, api_op: APIRequest, schema: APISchema) -> APIObjectList:
        namespace = api_op.namespace if schema.namespaced else None
        async with self._session_factory() as session:
            rows = await ResourceRepo(session).list(
                group=schema.group, kind=schema.kind, namespace=namespace
            )
        return APIObjectList(type=schema.id, objects=[_to_api_object(schema, r) for r in rows])

    async def update(
        self, api_op: APIRequest, schema: APISchema, data: APIObject, id: str
    ) -> APIObject:
        namespace, name = _split_id(schema, id, api_op.namespace)

        await api_op.ensure_active()
        async with self._session_factory() as session, session.begin():
            repo = ResourceRepo(session)
            row = await repo.get(group=schema.group, kind=schema.kind, namespace=namespace, name=name)
            if row is None:
                raise NotFoundError(f"{schema.kind} {_display(namespace, name)!r} not found")

            incoming = data.object.get("metadata") or {}
            expected = incoming.get("resourceVersion") if isinstance(incoming, dict) else None
            if expected is not None and str(expected) != str(row.resource_version):
                raise ConflictError(
                    f"{schema.kind} {_display(namespace, name)!r} has been modified; "
                    f"resourceVersion {expected} is stale"
                )

            if api_op.verb == Verb.patch:
                document = _clean_document(merge_patch(row.document, data.object))
            else:
                document = _clean_document(data.object)
            metadata = document["metadata"]
            if metadata.get("name", name) != name:
                raise InvalidBodyError("metadata.name cannot be changed")
            if schema.namespaced and metadata.get("namespace", namespace) != namespace:
                raise InvalidBodyError("metadata.namespace cannot be changed")
            metadata["name"] = name
            _set_namespace(schema, metadata, namespace)

            row = await repo.replace_document(row, document)

        log.info("store.updated", kind=schema.kind, namespace=namespace, name=name, verb=api_op.verb)
        return _to_api_object(schema, row)

    async def delete(self, api_op: APIRequest, schema: APISchema, id: str) -> APIObject:
        namespace, name = _split_id(schema, id, api_op.namespace)

        await api_op.ensure_active()
        async with self._session_factory() as session, session.begin():
            repo = ResourceRepo(session)
            row = await repo.get(group=schema.group, kind=schema.kind, namespace=namespace, name=name)
            if row is None:
                raise NotFoundError(f"{schema.kind} {_display(namespace, name)!r} not found")
            deleted = _to_api_object(schema, row)
            await repo.delete(row)

        log.info("store.deleted", kind=schema.kind, namespace=namespace, name=name)
        return deleted

    def watch(self, api_op: APIRequest, schema: APISchema) -> AsyncIterator[WatchEvent]:
        raise MethodNotAllowedError(f"watch is not supported for {schema.id}")


def merge_patch(target: Any, patch: Any) -> Any:
    """
    RFC 7386 JSON merge patch: objects merge recursively, null deletes, anything else replaces.
    """

    if not isinstance(patch, dict):
        return copy.deepcopy(patch)
    result = copy.deepcopy(target) if isinstance(target, dict) else {}
    for key, value in patch.items():
        if value is None:
            result.pop(key, None)
        else:
            result[key] = merge_patch(result.get(key), value)
    return result


def _clean_document(raw: dict[str, Any]) -> dict[str, Any]:
    document = copy.deepcopy(raw)
    # Envelope fields added by APIObject.to_dict are not part of the object.
    document.pop("type", None)
    document.pop("id", None)
    metadata = document.get("metadata")
    if metadata is None:
        metadata = {}
    if not isinstance(metadata, dict):
        raise InvalidBodyError("metadata must be an object")
    for key in _SYSTEM_METADATA:
        metadata.pop(key, None)
    document["metadata"] = metadata
    return document


def _namespace_for(schema: APISchema, from_path: str, from_body: Any) -> str:
    if not schema.namespaced:
        return ""
    if from_body is not None and not isinstance(from_body, str):
        raise InvalidBodyError("metadata.namespace must be a string")
    if from_path and from_body and from_path != from_body:
        raise InvalidBodyError(
            f"metadata.namespace {from_body!r} does not match request namespace {from_path!r}"
        )
    return from_path or from_body or DEFAULT_NAMESPACE


def _set_namespace(schema: APISchema, metadata: dict[str, Any], namespace: str) -> None:
    if schema.namespaced:
        metadata["namespace"] = namespace
    else:
        metadata.pop("namespace", None)


def _split_id(schema: APISchema, id: str, namespace: str) -> tuple[str, str]:
    if not schema.namespaced:
        return "", id
    if "/" in id:
        ns, _, name = id.partition("/")
        return ns, name
    return namespace or DEFAULT_NAMESPACE, id


def _display(namespace: str, name: str) -> str:
    return f"{namespace}/{name}" if namespace else name


def _to_api_object(schema: APISchema, row: Resource) -> APIObject:
    document = copy.deepcopy(row.document)
    document["apiVersion"] = f"{schema.group}/{schema.version}" if schema.group else schema.version
    document["kind"] = schema.kind
    metadata = document.setdefault("metadata", {})
    metadata["uid"] = row.uid
    metadata["resourceVersion"] = str(row.resource_version)
    metadata["creationTimestamp"] = row.created_at.isoformat() + "Z"
    return APIObject(type=schema.id, id=_display(row.namespace, row.name), object=document)


# --- Module Notes -----------------------------------------------------------
# One session per operation; writes run inside `session.begin()` so a raised
# ConflictError/NotFoundError rolls the transaction back.
