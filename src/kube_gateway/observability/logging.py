"""
kube_gateway.observability.logging

structlog setup for the gateway.

Responsibilities:
- Render every log event as one JSON line tagged with the service name.
- Keep bearer tokens and other credentials out of log output.
- Bind the authenticated caller into the request's log context.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from kube_gateway.auth.models import Identity

# Event keys whose values must never reach a log sink.
REDACTED_KEYS = frozenset({"authorization", "token", "access_token", "jwt_secret", "password"})


def configure_logging(*, service_name: str, level: str) -> None:
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            _service_tagger(service_name),
            _redact_credentials,
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def _service_tagger(service_name: str):
    def processor(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        event_dict.setdefault("service", service_name)
        return event_dict

    return processor


def _redact_credentials(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    for key in REDACTED_KEYS.intersection(event_dict):
        event_dict[key] = "[redacted]"
    return event_dict


def bind_caller(identity: Identity | None) -> None:
    if identity is None:
        structlog.contextvars.bind_contextvars(user=None)
        return
    structlog.contextvars.bind_contextvars(user=identity.name, uid=identity.uid)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


# --- Module Notes -----------------------------------------------------------
# The request id, path and method are bound by `observability.middleware`; the
# caller is bound by `auth.middleware` through `bind_caller`.
