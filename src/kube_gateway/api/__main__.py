"""
kube_gateway.api.__main__

`python -m kube_gateway.api` / `kube-gateway`: serve the gateway with uvicorn.

Operator extensions (`extensions.default_templates`) are registered by `create_app`,
so they are in place before uvicorn accepts the first connection.
"""

from __future__ import annotations

import uvicorn

from kube_gateway.api.app import create_app
from kube_gateway.settings import get_settings


def main() -> None:
    settings = get_settings()

    uvicorn.run(
        create_app(settings=settings),
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
        # Logging is owned by structlog (`configure_logging`), not uvicorn's dictConfig.
        log_config=None,
    )


if __name__ == "__main__":
    main()
