"""
kube_gateway.access

Authorization package.

Responsibilities:
- The access control oracle contract consumed by the dispatcher and store decorators.
- A role-based implementation driven by settings.
"""

# Package marker.
