"""
kube_gateway.api.app

FastAPI app factory for the gateway.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Register schema templates before serving, then resolve schemas once at startup.
- Initialize and dispose shared infrastructure (DB engine/session factory, HTTP client).
- Provide a single composition root where cross-cutting concerns live.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from kube_gateway import __version__
from kube_gateway.access.control import AccessControl, RoleBasedAccessControl
from kube_gateway.api.routers.dev_auth import router as dev_auth_router
from kube_gateway.api.routers.health import router as health_router
from kube_gateway.api.routers.resources import router as resources_router
from kube_gateway.auth.authenticator import Authenticator, build_authenticator
from kube_gateway.auth.middleware import AuthMiddleware
from kube_gateway.db.init_db import init_db
from kube_gateway.db.session import create_engine, create_sessionmaker
from kube_gateway.errors import APIError
from kube_gateway.extensions import default_templates
from kube_gateway.observability.logging import configure_logging, get_logger
from kube_gateway.observability.middleware import RequestContextMiddleware
from kube_gateway.schema.catalog import ResourceKind
from kube_gateway.schema.factory import SchemaFactory
from kube_gateway.schema.template import Template
from kube_gateway.settings import Settings, get_settings
from kube_gateway.store.sql import SqlResourceStore

log = get_logger(__name__)


def create_app(
    *,
    settings: Settings,
    authenticator: Authenticator | None = None,
    access_control: AccessControl | None = None,
    templates: Iterable[Template] | None = None,
) -> FastAPI:
    # Configure structured logging once at process startup (before app serves requests).
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    http: httpx.AsyncClient | None = None
    if authenticator is None:
        if settings.auth_mode == "token_review":
            http = httpx.AsyncClient(timeout=settings.token_review_timeout_seconds)
        authenticator = build_authenticator(settings, http=http)
    if access_control is None:
        access_control = RoleBasedAccessControl.from_settings(settings)

    schema_factory: SchemaFactory

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env, auth_mode=settings.auth_mode)
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        if settings.env in ("dev", "test"):
            # Dev/test convenience: create tables automatically. Prod should use Alembic migrations.
            await init_db(engine)

        # Registration is closed from here on; every kind is resolved exactly once.
        app.state.schemas = schema_factory.build()
        try:
            yield
        finally:
            await engine.dispose()
            if http is not None:
                await http.aclose()
            log.info("shutdown")

    app = FastAPI(
        title="kube-gateway",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    def default_store(_: ResourceKind) -> SqlResourceStore:
        # Called during `build()`, after the lifespan created the sessionmaker.
        return SqlResourceStore(app.state.sessionmaker)

    schema_factory = SchemaFactory(default_store=default_store)
    for template in default_templates() if templates is None else templates:
        schema_factory.add_template(template)
    app.state.schema_factory = schema_factory
    app.state.access_control = access_control

    app.dependency_overrides[get_settings] = lambda: settings

    @app.exception_handler(APIError)
    async def _api_error(_: Request, exc: APIError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    # Last added runs first: request context, then authentication.
    app.add_middleware(AuthMiddleware, authenticator=authenticator)
    app.add_middleware(RequestContextMiddleware)

    app.include_router(health_router, tags=["health"])
    app.include_router(dev_auth_router)
    app.include_router(resources_router)

    return app


# --- Module Notes -----------------------------------------------------------
# Extra templates can be registered through `app.state.schema_factory.add_template`
# until the lifespan starts; after that the registry rejects them.
