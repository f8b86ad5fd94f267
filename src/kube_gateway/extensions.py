"""
kube_gateway.extensions

Operator customizations installed on the schema factory at startup.

Responsibilities:
- Lock down Secrets entirely (no method reaches the store).
- Only let callers create ConfigMaps when they may also create Secrets.
"""

from __future__ import annotations

from kube_gateway.access.control import resource_name
from kube_gateway.schema.template import Template, restrict
from kube_gateway.store.secondary import require_permission
from kube_gateway.types import Verb


def default_templates() -> list[Template]:
    return [
        restrict("", "Secret", ["GET", "POST", "PUT", "DELETE", "PATCH"]),
        Template(
            group="",
            kind="ConfigMap",
            store_factory=require_permission(resource_name("secrets"), Verb.create),
        ),
    ]
