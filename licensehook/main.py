"""licensehook: FastAPI application entry point."""

import uuid
from contextlib import asynccontextmanager

# CRITICAL ORDER: configure_structlog MUST be called before all other app imports
# (structlog caches the processor chain on first use).
from licensehook.core.logging import configure_structlog
from licensehook.core.config import get_settings as _get_settings_early

_early_settings = _get_settings_early()
configure_structlog(debug=_early_settings.debug)

import structlog

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from licensehook.api.routes import api_router
from licensehook.core.config import get_settings
from licensehook.db import close_db, init_db
from licensehook.middleware.correlation import get_correlation_id, setup_correlation_middleware

logger = structlog.get_logger(__name__)


def warn_on_missing_secrets() -> None:
    """Log (but do not fail on) unset delivery secrets; the webhook still records and provisions without them."""
    settings = get_settings()
    missing = [
        name
        for name, value in {
            "license_notify_token": settings.license_notify_token,
            "convertkit_api_key": settings.convertkit_api_key,
            "convertkit_form_id": settings.convertkit_form_id,
        }.items()
        if not value
    ]
    if missing:
        logger.warning("license_delivery_not_configured", missing=missing)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    settings = get_settings()
    logger.info("startup_begin", app_name=settings.app_name, debug=settings.debug)

    await init_db()
    logger.info("db_initialized")

    warn_on_missing_secrets()

    yield

    logger.info("shutdown_begin")
    await close_db()
    logger.info("shutdown_complete")


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> PlainTextResponse:
    """Log HTTP errors with a debug_id and return the detail as plain text."""
    debug_id = str(uuid.uuid4())

    logger.warning(
        "http_exception",
        status_code=exc.status_code,
        debug_id=debug_id,
        correlation_id=get_correlation_id(),
        path=request.url.path,
        method=request.method,
        detail=exc.detail,
    )

    return PlainTextResponse(
        str(exc.detail),
        status_code=exc.status_code,
        headers={**(exc.headers or {}), "X-Debug-ID": debug_id},
    )


async def generic_exception_handler(request: Request, exc: Exception) -> PlainTextResponse:
    """Log unhandled errors with traceback, return a generic 500 (no internals leaked)."""
    debug_id = str(uuid.uuid4())

    logger.error(
        "unhandled_exception",
        debug_id=debug_id,
        correlation_id=get_correlation_id(),
        path=request.url.path,
        method=request.method,
        error=str(exc),
        error_type=type(exc).__name__,
        exc_info=True,
    )

    return PlainTextResponse(
        "internal server error",
        status_code=500,
        headers={"X-Debug-ID": debug_id},
    )


def install_exception_handlers(app: FastAPI) -> None:
    # Starlette base class also covers routing-level 404/405
    app.exception_handler(StarletteHTTPException)(http_exception_handler)
    app.exception_handler(Exception)(generic_exception_handler)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Paddle webhook ingestion and license provisioning",
        version="0.1.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_correlation_middleware(app)
    install_exception_handlers(app)

    app.include_router(api_router, prefix="/api")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "licensehook.main:app",
        host="0.0.0.0",
        port=8000,
        reload=_early_settings.debug,
    )
