"""
kube_gateway.store

Resource stores.

Responsibilities:
- The store contract and forwarding decorator base (`store.base`).
- The default SQL-backed generic store (`store.sql`).
- Reusable decorators (`store.secondary`).
"""

# Package marker.
