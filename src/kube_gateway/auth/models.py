"""
kube_gateway.auth.models

Auth domain models.

Responsibilities:
- Define the authenticated identity type (`Identity`) attached to each request.
"""

from __future__ import annotations

from dataclasses import dataclass, field

SYSTEM_MASTERS = "system:masters"


@dataclass(frozen=True, slots=True)
class Identity:
    """
    Authenticated caller identity.
    """

    name: str
    uid: str
    groups: frozenset[str] = field(default_factory=frozenset)

    def in_group(self, group: str) -> bool:
        return group in self.groups


# --- Module Notes -----------------------------------------------------------
# Keep this model minimal; it is built per request and shared by stores and access control.
