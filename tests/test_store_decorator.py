"""
tests.test_store_decorator

Store decoration: transparent forwarding and the secondary permission check.
"""

from __future__ import annotations

import pytest
from support import DisconnectedRequest, RecordingStore, StubAccessControl

from kube_gateway.auth.models import Identity
from kube_gateway.errors import ConflictError, PermissionDeniedError, RequestCancelledError
from kube_gateway.extensions import default_templates
from kube_gateway.store.base import StoreDecorator
from kube_gateway.store.secondary import SecondaryCheckStore, require_permission
from kube_gateway.types import APIObject, APIRequest, APISchema, Verb


def _api_op(schema: APISchema, access_control: StubAccessControl, verb: Verb) -> APIRequest:
    return APIRequest(
        identity=Identity(name="alice", uid="u-alice", groups=frozenset({"devs"})),
        access_control=access_control,
        verb=verb,
        schema=schema,
        namespace="default",
    )


@pytest.mark.asyncio
async def test_plain_decorator_forwards_every_operation(configmap_schema: APISchema) -> None:
    inner = RecordingStore()
    store = StoreDecorator(inner)
    api_op = _api_op(configmap_schema, StubAccessControl(), Verb.get)
    data = APIObject(type="configmaps", id="", object={"metadata": {"name": "cm"}})

    assert await store.create(api_op, configmap_schema, data) is inner.result
    assert await store.get(api_op, configmap_schema, "default/cm") is inner.result
    assert await store.list(api_op, configmap_schema) is inner.list_result
    assert await store.update(api_op, configmap_schema, data, "default/cm") is inner.result
    assert await store.delete(api_op, configmap_schema, "default/cm") is inner.result
    events = [e async for e in store.watch(api_op, configmap_schema)]

    assert events == inner.events
    assert inner.args == [
        ("create", (api_op, configmap_schema, data)),
        ("get", (api_op, configmap_schema, "default/cm")),
        ("list", (api_op, configmap_schema)),
        ("update", (api_op, configmap_schema, data, "default/cm")),
        ("delete", (api_op, configmap_schema, "default/cm")),
        ("watch", (api_op, configmap_schema)),
    ]


@pytest.mark.asyncio
async def test_plain_decorator_passes_inner_errors_through(configmap_schema: APISchema) -> None:
    failure = ConflictError("already exists")
    store = StoreDecorator(RecordingStore(fail_with=failure))
    api_op = _api_op(configmap_schema, StubAccessControl(), Verb.get)

    with pytest.raises(ConflictError) as exc_info:
        await store.get(api_op, configmap_schema, "default/cm")
    assert exc_info.value is failure


@pytest.mark.asyncio
async def test_secondary_check_denied_never_reaches_inner_create(
    configmap_schema: APISchema,
) -> None:
    inner = RecordingStore()
    access = StubAccessControl(deny={("secrets", "create")})
    store = SecondaryCheckStore(inner, resource="secrets", verb=Verb.create)
    api_op = _api_op(configmap_schema, access, Verb.create)

    with pytest.raises(PermissionDeniedError) as exc_info:
        await store.create(api_op, configmap_schema, APIObject(type="configmaps", id=""))

    assert exc_info.value is access.denial
    assert inner.calls["create"] == 0
    # Kind-level check: no namespace and no name.
    assert access.calls == [("secrets", "create", "", "")]


@pytest.mark.asyncio
async def test_secondary_check_permitted_delegates_unchanged(configmap_schema: APISchema) -> None:
    inner = RecordingStore()
    access = StubAccessControl()
    store = SecondaryCheckStore(inner, resource="secrets", verb=Verb.create)
    api_op = _api_op(configmap_schema, access, Verb.create)
    data = APIObject(type="configmaps", id="", object={"metadata": {"name": "cm"}})

    result = await store.create(api_op, configmap_schema, data)

    assert result is inner.result
    assert inner.args == [("create", (api_op, configmap_schema, data))]


@pytest.mark.asyncio
async def test_secondary_check_only_guards_configured_verbs(configmap_schema: APISchema) -> None:
    inner = RecordingStore()
    access = StubAccessControl(deny={("secrets", "create")})
    store = SecondaryCheckStore(inner, resource="secrets", verb=Verb.create)
    api_op = _api_op(configmap_schema, access, Verb.delete)

    await store.delete(api_op, configmap_schema, "default/cm")
    await store.get(api_op, configmap_schema, "default/cm")

    assert access.calls == []
    assert inner.calls["delete"] == 1
    assert inner.calls["get"] == 1


@pytest.mark.asyncio
async def test_secondary_check_stops_when_client_disconnected(configmap_schema: APISchema) -> None:
    inner = RecordingStore()
    store = SecondaryCheckStore(inner, resource="secrets", verb=Verb.create)
    api_op = _api_op(configmap_schema, StubAccessControl(), Verb.create)
    api_op.request = DisconnectedRequest()  # type: ignore[assignment]

    with pytest.raises(RequestCancelledError):
        await store.create(api_op, configmap_schema, APIObject(type="configmaps", id=""))
    assert inner.calls["create"] == 0


@pytest.mark.asyncio
async def test_configmap_template_requires_secret_create(configmap_schema: APISchema) -> None:
    template = next(t for t in default_templates() if t.kind == "ConfigMap")
    assert template.store_factory is not None

    inner = RecordingStore()
    store = template.store_factory(inner)
    access = StubAccessControl(deny={("secrets", "create")})

    with pytest.raises(PermissionDeniedError):
        await store.create(
            _api_op(configmap_schema, access, Verb.create),
            configmap_schema,
            APIObject(type="configmaps", id=""),
        )
    assert inner.calls["create"] == 0


@pytest.mark.asyncio
async def test_require_permission_can_guard_updates(configmap_schema: APISchema) -> None:
    inner = RecordingStore()
    store = require_permission("secrets", Verb.update, guarded=(Verb.update,))(inner)
    access = StubAccessControl(deny={("secrets", "update")})

    # Patch requests reach stores through update and are guarded with it.
    with pytest.raises(PermissionDeniedError):
        await store.update(
            _api_op(configmap_schema, access, Verb.patch),
            configmap_schema,
            APIObject(type="configmaps", id=""),
            "default/cm",
        )
    assert inner.calls["update"] == 0
