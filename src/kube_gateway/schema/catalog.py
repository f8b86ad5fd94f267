"""
kube_gateway.schema.catalog

Static catalog of the resource kinds the gateway serves.
"""

from __future__ import annotations

from dataclasses import dataclass

from kube_gateway.access.control import resource_name


@dataclass(frozen=True, slots=True)
class ResourceKind:
    group: str
    version: str
    kind: str
    plural: str
    namespaced: bool = True

    @property
    def resource(self) -> str:
        return resource_name(self.plural, self.group)

    @property
    def api_version(self) -> str:
        return f"{self.group}/{self.version}" if self.group else self.version


DEFAULT_KINDS: tuple[ResourceKind, ...] = (
    ResourceKind(group="", version="v1", kind="ConfigMap", plural="configmaps"),
    ResourceKind(group="", version="v1", kind="Secret", plural="secrets"),
    ResourceKind(group="", version="v1", kind="ServiceAccount", plural="serviceaccounts"),
    ResourceKind(group="", version="v1", kind="Namespace", plural="namespaces", namespaced=False),
    ResourceKind(group="apps", version="v1", kind="Deployment", plural="deployments"),
)
