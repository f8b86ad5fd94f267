"""
kube_gateway.api.routers.resources

Generic resource dispatcher under `/v1`.

Responsibilities:
- Map HTTP routes onto store operations for every resolved schema.
- Enforce, in order: authentication (401), known type (404), method allowed
  for the kind (405), primary access check for the verb (403).
- Hand the request context to the (possibly decorated) store.

Routes:
- GET    /v1/{type}                        list (all namespaces)
- POST   /v1/{type}                        create
- GET    /v1/{type}/{ns_or_name}           namespaced: list in namespace; cluster: get
- POST   /v1/{type}/{namespace}            create in namespace
- PUT|PATCH|DELETE /v1/{type}/{name}       cluster-scoped kinds
- GET|PUT|PATCH|DELETE /v1/{type}/{namespace}/{name}
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse
from starlette.status import HTTP_201_CREATED

from kube_gateway.access.control import AccessControl
from kube_gateway.api.deps import access_control_dep, schemas_dep
from kube_gateway.auth.deps import get_identity
from kube_gateway.errors import InvalidBodyError, MethodNotAllowedError, NotFoundError
from kube_gateway.schema.factory import SchemaCollection
from kube_gateway.store.base import Store
from kube_gateway.store.sql import DEFAULT_NAMESPACE
from kube_gateway.types import APIObject, APIRequest, APISchema, Verb

router = APIRouter(prefix="/v1", tags=["resources"])


def _schema_for(request: Request, schemas: SchemaCollection, type: str, verb: Verb) -> APISchema:
    # Unauthenticated callers are rejected before anything about the kind is revealed.
    get_identity(request)
    schema = schemas.lookup(type)
    if not schema.allows(verb):
        raise MethodNotAllowedError(f"{verb} is not allowed on {schema.id}")
    return schema


async def _authorize(
    request: Request,
    access_control: AccessControl,
    schema: APISchema,
    verb: Verb,
    namespace: str = "",
    name: str = "",
) -> tuple[APIRequest, Store]:
    api_op = APIRequest(
        identity=get_identity(request),
        access_control=access_control,
        verb=verb,
        schema=schema,
        namespace=namespace,
        name=name,
        request=request,
    )
    await access_control.can_do(api_op, schema.id, verb, namespace, name)
    if schema.store is None:
        raise MethodNotAllowedError(f"{schema.id} has no store")
    return api_op, schema.store


def _object(schema: APISchema, body: Any) -> APIObject:
    # Bodies are optional at the route level so method restrictions are checked first.
    if body is None:
        raise InvalidBodyError("Request body is required")
    if not isinstance(body, dict):
        raise InvalidBodyError("Request body must be a JSON object")
    return APIObject(type=schema.id, id="", object=body)


def _body_namespace(schema: APISchema, body: Any) -> str:
    if not schema.namespaced or not isinstance(body, dict):
        return ""
    metadata = body.get("metadata")
    namespace = metadata.get("namespace") if isinstance(metadata, dict) else None
    return namespace if isinstance(namespace, str) and namespace else DEFAULT_NAMESPACE


def _require_namespaced(schema: APISchema, namespaced: bool) -> None:
    if schema.namespaced != namespaced:
        scope = "namespaced" if schema.namespaced else "cluster-scoped"
        raise NotFoundError(f"{schema.id} is {scope}; no such route")


async def _list(api_op: APIRequest, store: Store, schema: APISchema) -> JSONResponse:
    return JSONResponse((await store.list(api_op, schema)).to_dict())


async def _create(api_op: APIRequest, store: Store, schema: APISchema, body: Any) -> JSONResponse:
    created = await store.create(api_op, schema, _object(schema, body))
    return JSONResponse(created.to_dict(), status_code=HTTP_201_CREATED)


async def _get(api_op: APIRequest, store: Store, schema: APISchema, id: str) -> JSONResponse:
    return JSONResponse((await store.get(api_op, schema, id)).to_dict())


async def _update(
    api_op: APIRequest, store: Store, schema: APISchema, body: Any, id: str
) -> JSONResponse:
    updated = await store.update(api_op, schema, _object(schema, body), id)
    return JSONResponse(updated.to_dict())


async def _delete(api_op: APIRequest, store: Store, schema: APISchema, id: str) -> JSONResponse:
    return JSONResponse((await store.delete(api_op, schema, id)).to_dict())


def _id(namespace: str, name: str) -> str:
    return f"{namespace}/{name}" if namespace else name


@router.get("/{type}")
async def list_resources(
    request: Request,
    type: str,
    schemas: SchemaCollection = Depends(schemas_dep),
    access_control: AccessControl = Depends(access_control_dep),
) -> JSONResponse:
    schema = _schema_for(request, schemas, type, Verb.list)
    api_op, store = await _authorize(request, access_control, schema, Verb.list)
    return await _list(api_op, store, schema)


@router.post("/{type}")
async def create_resource(
    request: Request,
    type: str,
    body: Any = Body(None),
    schemas: SchemaCollection = Depends(schemas_dep),
    access_control: AccessControl = Depends(access_control_dep),
) -> JSONResponse:
    schema = _schema_for(request, schemas, type, Verb.create)
    namespace = _body_namespace(schema, body)
    api_op, store = await _authorize(request, access_control, schema, Verb.create, namespace)
    return await _create(api_op, store, schema, body)


@router.get("/{type}/{segment}")
async def get_or_list_namespace(
    request: Request,
    type: str,
    segment: str,
    schemas: SchemaCollection = Depends(schemas_dep),
    access_control: AccessControl = Depends(access_control_dep),
) -> JSONResponse:
    get_identity(request)
    verb = Verb.list if schemas.lookup(type).namespaced else Verb.get
    schema = _schema_for(request, schemas, type, verb)
    if schema.namespaced:
        api_op, store = await _authorize(request, access_control, schema, verb, segment)
        return await _list(api_op, store, schema)
    api_op, store = await _authorize(request, access_control, schema, verb, "", segment)
    return await _get(api_op, store, schema, segment)


@router.post("/{type}/{namespace}")
async def create_namespaced_resource(
    request: Request,
    type: str,
    namespace: str,
    body: Any = Body(None),
    schemas: SchemaCollection = Depends(schemas_dep),
    access_control: AccessControl = Depends(access_control_dep),
) -> JSONResponse:
    schema = _schema_for(request, schemas, type, Verb.create)
    _require_namespaced(schema, True)
    api_op, store = await _authorize(request, access_control, schema, Verb.create, namespace)
    return await _create(api_op, store, schema, body)


@router.put("/{type}/{name}")
async def update_cluster_resource(
    request: Request,
    type: str,
    name: str,
    body: Any = Body(None),
    schemas: SchemaCollection = Depends(schemas_dep),
    access_control: AccessControl = Depends(access_control_dep),
) -> JSONResponse:
    schema = _schema_for(request, schemas, type, Verb.update)
    _require_namespaced(schema, False)
    api_op, store = await _authorize(request, access_control, schema, Verb.update, "", name)
    return await _update(api_op, store, schema, body, name)


@router.patch("/{type}/{name}")
async def patch_cluster_resource(
    request: Request,
    type: str,
    name: str,
    body: Any = Body(None),
    schemas: SchemaCollection = Depends(schemas_dep),
    access_control: AccessControl = Depends(access_control_dep),
) -> JSONResponse:
    schema = _schema_for(request, schemas, type, Verb.patch)
    _require_namespaced(schema, False)
    api_op, store = await _authorize(request, access_control, schema, Verb.patch, "", name)
    return await _update(api_op, store, schema, body, name)


@router.delete("/{type}/{name}")
async def delete_cluster_resource(
    request: Request,
    type: str,
    name: str,
    schemas: SchemaCollection = Depends(schemas_dep),
    access_control: AccessControl = Depends(access_control_dep),
) -> JSONResponse:
    schema = _schema_for(request, schemas, type, Verb.delete)
    _require_namespaced(schema, False)
    api_op, store = await _authorize(request, access_control, schema, Verb.delete, "", name)
    return await _delete(api_op, store, schema, name)


@router.get("/{type}/{namespace}/{name}")
async def get_resource(
    request: Request,
    type: str,
    namespace: str,
    name: str,
    schemas: SchemaCollection = Depends(schemas_dep),
    access_control: AccessControl = Depends(access_control_dep),
) -> JSONResponse:
    schema = _schema_for(request, schemas, type, Verb.get)
    _require_namespaced(schema, True)
    api_op, store = await _authorize(request, access_control, schema, Verb.get, namespace, name)
    return await _get(api_op, store, schema, _id(namespace, name))


@router.put("/{type}/{namespace}/{name}")
async def update_resource(
    request: Request,
    type: str,
    namespace: str,
    name: str,
    body: Any = Body(None),
    schemas: SchemaCollection = Depends(schemas_dep),
    access_control: AccessControl = Depends(access_control_dep),
) -> JSONResponse:
    schema = _schema_for(request, schemas, type, Verb.update)
    _require_namespaced(schema, True)
    api_op, store = await _authorize(request, access_control, schema, Verb.update, namespace, name)
    return await _update(api_op, store, schema, body, _id(namespace, name))


@router.patch("/{type}/{namespace}/{name}")
async def patch_resource(
    request: Request,
    type: str,
    namespace: str,
    name: str,
    body: Any = Body(None),
    schemas: SchemaCollection = Depends(schemas_dep),
    access_control: AccessControl = Depends(access_control_dep),
) -> JSONResponse:
    schema = _schema_for(request, schemas, type, Verb.patch)
    _require_namespaced(schema, True)
    api_op, store = await _authorize(request, access_control, schema, Verb.patch, namespace, name)
    return await _update(api_op, store, schema, body, _id(namespace, name))


@router.delete("/{type}/{namespace}/{name}")
async def delete_resource(
    request: Request,
    type: str,
    namespace: str,
    name: str,
    schemas: SchemaCollection = Depends(schemas_dep),
    access_control: AccessControl = Depends(access_control_dep),
) -> JSONResponse:
    schema = _schema_for(request, schemas, type, Verb.delete)
    _require_namespaced(schema, True)
    api_op, store = await _authorize(request, access_control, schema, Verb.delete, namespace, name)
    return await _delete(api_op, store, schema, _id(namespace, name))


# --- Module Notes -----------------------------------------------------------
# Method restrictions are checked before any store or access-control call; a
# locked-down kind answers 405 regardless of who is asking.
