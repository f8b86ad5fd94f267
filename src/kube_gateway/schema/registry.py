"""
kube_gateway.schema.registry

Process-wide schema template registry.

Responsibilities:
- Accept template registrations during startup and merge them per (group, kind).
- Close the registration gate exactly once (`freeze`), after which the registry
  is read-only and safe for unsynchronized concurrent reads.
- Resolve a kind's default schema into its final schema: restricted verbs,
  customizers, and decorated store.
"""

from __future__ import annotations

import threading

from kube_gateway.errors import RegistryFrozenError, TemplateConflictError
from kube_gateway.observability.logging import get_logger
from kube_gateway.schema.template import ANY, Template
from kube_gateway.types import APISchema, Verb

log = get_logger(__name__)


class TemplateRegistry:
    """
    Merge rules for templates that apply to the same kind:
    - disallowed verbs are unioned (a restriction can never be lifted);
    - customizers and store factories apply in registration order, so the most
      recently registered store factory is the outermost decorator;
    - a second store factory for the exact same key is rejected.

    Keys may use `ANY` for the group and/or kind.
    """

    def __init__(self) -> None:
        self._templates: list[Template] = []
        self._factory_keys: set[tuple[str, str]] = set()
        self._lock = threading.Lock()
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def add_template(self, template: Template) -> None:
        with self._lock:
            if self._frozen:
                raise RegistryFrozenError(
                    f"Cannot register template for {_label(template.key)}: registry is frozen"
                )
            if template.store_factory is not None:
                if template.key in self._factory_keys:
                    raise TemplateConflictError(
                        f"A store factory is already registered for {_label(template.key)}"
                    )
                self._factory_keys.add(template.key)
            self._templates.append(template)

        log.info(
            "schema.template_registered",
            group=template.group,
            kind=template.kind,
            disallowed=sorted(template.disallowed_methods),
            store_factory=template.store_factory is not None,
            customize=template.customize is not None,
        )

    def freeze(self) -> None:
        with self._lock:
            if self._frozen:
                return
            self._frozen = True
        log.info("schema.registry_frozen", templates=len(self._templates))

    def templates_for(self, group: str, kind: str) -> list[Template]:
        return [t for t in self._templates if _matches(t, group, kind)]

    def disallowed_verbs(self, group: str, kind: str) -> frozenset[Verb]:
        verbs: set[Verb] = set()
        for template in self.templates_for(group, kind):
            verbs |= template.disallowed_methods
        return frozenset(verbs)

    def resolve(self, group: str, kind: str, default: APISchema) -> APISchema:
        """
        Build the final schema for (group, kind) from its default schema.

        The first call freezes the registry. The default schema is not modified.
        """

        self.freeze()
        schema = default.copy()
        for template in self.templates_for(group, kind):
            if template.customize is not None:
                template.customize(schema)
            if template.store_factory is not None:
                if schema.store is None:
                    raise ValueError(f"{_label((group, kind))} has no store to decorate")
                schema.store = template.store_factory(schema.store)

        # Applied last so no customizer can bring a restricted verb back.
        schema.allowed_verbs = schema.allowed_verbs - self.disallowed_verbs(group, kind)
        return schema


def _matches(template: Template, group: str, kind: str) -> bool:
    return template.group in (ANY, group) and template.kind in (ANY, kind)


def _label(key: tuple[str, str]) -> str:
    group, kind = key
    return f"{kind} (group {group!r})"


# --- Module Notes -----------------------------------------------------------
# Registration happens in `api.app.create_app`; resolution happens once per kind
# in `schema.factory.SchemaFactory.build` during application startup.
