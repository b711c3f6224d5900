"""FastAPI application entry point.

Wiring only: lifespan, exception handlers, middleware, routers.
No business logic here. See lawdesk.core.lifespan and lawdesk.core.exception_handlers.

Settings are loaded inside create_app() so that tests can set env (and optionally
clear get_settings cache) before importing or calling create_app().
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lawdesk.api.v1.router import api_router
from lawdesk.core.config import get_settings
from lawdesk.core.exception_handlers import register_exception_handlers
from lawdesk.core.lifespan import create_lifespan
from lawdesk.core.limiter import limiter
from lawdesk.infrastructure.external.storage.local_storage import UPLOAD_PATH
from lawdesk.middleware import (
    RequestIDMiddleware,
    RequestSizeLimitMiddleware,
    TenantContextMiddleware,
)
from lawdesk.shared.telemetry.logging import setup_logging


def create_app() -> FastAPI:
    """Build and return the FastAPI application. Settings are resolved here (deferred from import)."""
    settings = get_settings()
    setup_logging()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_lifespan,
    )

    app.state.limiter = limiter
    register_exception_handlers(app)

    # Middleware: last added = outermost. Order: size limit → request ID → tenant context → CORS.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.allowed_origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(TenantContextMiddleware, header_name=settings.tenant_header_name)
    app.add_middleware(RequestIDMiddleware, header_name=settings.request_id_header)
    app.add_middleware(
        RequestSizeLimitMiddleware,
        max_bytes=settings.max_request_body_bytes,
        path_limits={UPLOAD_PATH: settings.max_upload_bytes},
    )

    app.include_router(api_router, prefix="/api/v1")
    return app


app = create_app()
