"""
kube_gateway.access.control

Access control oracle.

Responsibilities:
- Define the `AccessControl` contract: can this identity perform verb V on resource R?
- Build `<plural>.<group>` resource names.
- Provide `RoleBasedAccessControl`, a group -> rules implementation.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from kube_gateway.auth.models import SYSTEM_MASTERS
from kube_gateway.errors import PermissionDeniedError
from kube_gateway.observability.logging import get_logger
from kube_gateway.settings import AccessRuleConfig, Settings
from kube_gateway.types import APIRequest, Verb

log = get_logger(__name__)

WILDCARD = "*"


def resource_name(plural: str, group: str = "") -> str:
    # The core ("") group has no suffix: "secrets", but "deployments.apps".
    return f"{plural}.{group}" if group else plural


@runtime_checkable
class AccessControl(Protocol):
    async def can_do(
        self,
        api_op: APIRequest,
        resource: str,
        verb: Verb | str,
        namespace: str = "",
        name: str = "",
    ) -> None:
        """
        Return None when permitted; raise `PermissionDeniedError` otherwise.

        Empty namespace/name means the check covers every namespace/name of the kind.
        """
        ...


@dataclass(frozen=True, slots=True)
class AccessRule:
    resources: frozenset[str]
    verbs: frozenset[str]
    namespaces: frozenset[str] = frozenset()
    names: frozenset[str] = frozenset()

    @classmethod
    def from_config(cls, cfg: AccessRuleConfig) -> AccessRule:
        return cls(
            resources=frozenset(cfg.resources),
            verbs=frozenset(v.lower() for v in cfg.verbs),
            namespaces=frozenset(cfg.namespaces),
            names=frozenset(cfg.names),
        )

    def matches(self, resource: str, verb: str, namespace: str, name: str) -> bool:
        if not _covers(self.resources, resource) or not _covers(self.verbs, verb):
            return False
        # A kind-level check (no namespace) needs a rule that is not namespace-restricted.
        if self.namespaces and (not namespace or not _covers(self.namespaces, namespace)):
            return False
        if self.names and (not name or not _covers(self.names, name)):
            return False
        return True


def _covers(allowed: frozenset[str], value: str) -> bool:
    return WILDCARD in allowed or value in allowed


class RoleBasedAccessControl:
    """
    Group-based RBAC:
    - Members of the admin group may do anything.
    - Other callers need at least one matching rule bound to one of their groups.
    """

    def __init__(
        self,
        *,
        rules: Mapping[str, Iterable[AccessRule]] | None = None,
        admin_group: str = SYSTEM_MASTERS,
    ) -> None:
        self._rules = {group: tuple(rs) for group, rs in (rules or {}).items()}
        self._admin_group = admin_group

    @classmethod
    def from_settings(cls, settings: Settings) -> RoleBasedAccessControl:
        return cls(
            rules={
                group: [AccessRule.from_config(r) for r in rules]
                for group, rules in settings.access_rules.items()
            },
            admin_group=settings.admin_group,
        )

    async def can_do(
        self,
        api_op: APIRequest,
        resource: str,
        verb: Verb | str,
        namespace: str = "",
        name: str = "",
    ) -> None:
        identity = api_op.identity
        verb = str(verb).lower()
        if identity is None:
            raise PermissionDeniedError(f"Anonymous callers cannot {verb} {resource}")
        if identity.in_group(self._admin_group):
            return

        for group in identity.groups:
            for rule in self._rules.get(group, ()):
                if rule.matches(resource, verb, namespace, name):
                    return

        log.info(
            "access.denied",
            user=identity.name,
            resource=resource,
            verb=verb,
            namespace=namespace,
            name=name,
        )
        raise PermissionDeniedError(_denied_message(identity.name, resource, verb, namespace, name))


def _denied_message(user: str, resource: str, verb: str, namespace: str, name: str) -> str:
    target = resource
    if name:
        target = f"{resource} {name!r}"
    scope = f" in namespace {namespace!r}" if namespace else " at the cluster scope"
    return f"User {user!r} cannot {verb} {target}{scope}"


# --- Module Notes -----------------------------------------------------------
# The oracle is also called from store decorators for cross-kind checks, e.g. a
# ConfigMap create that requires "create" on "secrets".
