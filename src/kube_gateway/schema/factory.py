"""
kube_gateway.schema.factory

Schema factory and the resolved schema collection.

Responsibilities:
- Hold the kind catalog, the default store factory, and the template registry.
- Resolve every kind exactly once and cache the result for the process lifetime.
- Look up schemas by id for the dispatcher.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator

from kube_gateway.errors import NotFoundError
from kube_gateway.observability.logging import get_logger
from kube_gateway.schema.catalog import DEFAULT_KINDS, ResourceKind
from kube_gateway.schema.registry import TemplateRegistry
from kube_gateway.schema.template import Template
from kube_gateway.store.base import Store
from kube_gateway.types import DEFAULT_VERBS, APISchema

log = get_logger(__name__)

DefaultStoreFactory = Callable[[ResourceKind], Store]


class SchemaCollection:
    def __init__(self, schemas: Iterable[APISchema]) -> None:
        self._by_id = {s.id: s for s in schemas}

    def lookup(self, schema_id: str) -> APISchema:
        schema = self._by_id.get(schema_id)
        if schema is None:
            raise NotFoundError(f"Unknown resource type {schema_id!r}")
        return schema

    def __iter__(self) -> Iterator[APISchema]:
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)


class SchemaFactory:
    def __init__(
        self,
        *,
        default_store: DefaultStoreFactory,
        kinds: Iterable[ResourceKind] = DEFAULT_KINDS,
        registry: TemplateRegistry | None = None,
    ) -> None:
        self._kinds = tuple(kinds)
        self._default_store = default_store
        self.registry = registry or TemplateRegistry()
        self._collection: SchemaCollection | None = None

    def add_template(self, template: Template) -> None:
        self.registry.add_template(template)

    def default_schema(self, kind: ResourceKind) -> APISchema:
        return APISchema(
            id=kind.resource,
            group=kind.group,
            version=kind.version,
            kind=kind.kind,
            plural=kind.plural,
            namespaced=kind.namespaced,
            allowed_verbs=DEFAULT_VERBS,
            store=self._default_store(kind),
        )

    def build(self) -> SchemaCollection:
        # Built once; later calls return the cached collection.
        if self._collection is None:
            self.registry.freeze()
            schemas = [
                self.registry.resolve(k.group, k.kind, self.default_schema(k)) for k in self._kinds
            ]
            self._collection = SchemaCollection(schemas)
            for s in schemas:
                log.info("schema.resolved", id=s.id, allowed=sorted(s.allowed_verbs))
        return self._collection


# --- Module Notes -----------------------------------------------------------
# Kinds are a static catalog; discovery from a live cluster is out of scope.
