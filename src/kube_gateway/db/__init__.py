"""
kube_gateway.db

Persistence package (SQLAlchemy async) backing the default resource store.

Responsibilities:
- Provide the resource ORM model, engine/session setup, and the resource repository.
"""

# Package marker.
