"""
kube_gateway.schema.template

Schema templates: startup-time customizations for a (group, kind) pair.

Responsibilities:
- Define `Template` (method restrictions, store factory, schema customizer).
- Provide `disallow_methods` for customizers that edit a schema directly.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from kube_gateway.store.base import StoreFactory
from kube_gateway.types import APISchema, Verb, parse_verbs

# Matches every group or every kind when used in a template key.
ANY = "*"

SchemaCustomizer = Callable[[APISchema], None]


@dataclass(frozen=True, slots=True)
class Template:
    """
    `group=""` is the core API group. `disallowed_methods` accepts verbs or HTTP
    method names; `GET` blocks get, list, and watch.
    """

    group: str
    kind: str
    disallowed_methods: frozenset[Verb] = field(default_factory=frozenset)
    store_factory: StoreFactory | None = None
    customize: SchemaCustomizer | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "disallowed_methods", parse_verbs(self.disallowed_methods))

    @property
    def key(self) -> tuple[str, str]:
        return (self.group, self.kind)


def disallow_methods(schema: APISchema, *methods: str | Verb) -> None:
    schema.allowed_verbs = schema.allowed_verbs - parse_verbs(methods)


def restrict(group: str, kind: str, methods: Iterable[str | Verb]) -> Template:
    return Template(group=group, kind=kind, disallowed_methods=frozenset(methods))
