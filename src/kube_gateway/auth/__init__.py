"""
kube_gateway.auth

Authentication package.

Responsibilities:
- Identity model and JWT helpers.
- The pluggable identity provider contract and its concrete providers.
- Middleware mounting the identity provider ahead of resource dispatch.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Authorization lives in `kube_gateway.access`; this package only establishes who the caller is.
