"""
kube_gateway.schema

Schema customization package.

Responsibilities:
- Static catalog of served resource kinds.
- Schema templates and the process-wide template registry.
- The schema factory that resolves every kind once at startup.
"""

# Package marker.
