"""
Rentals API - Main Application
FastAPI application with CORS, error handling, middleware, and logging.
The application owns the PropertyStore: it is built in the lifespan
handler, loaded once, and handed to routes through app.state.
"""
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional
import logging
import traceback

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from rentals.api.routes import properties_router, saved_router
from rentals.config import Settings, get_settings
from rentals.dependencies import build_property_store, store_error_to_http
from rentals.exceptions import ConfigurationError, RentalsError
from rentals.logging_config import setup_logging
from rentals.services.property_store import PropertyStore

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[PropertyStore] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Settings to use; defaults to the environment
        store: Pre-built state container; when omitted one is built from
            settings at startup
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("=" * 70)
        logger.info(f"Starting {settings.PROJECT_NAME} v{settings.VERSION}")
        logger.info("=" * 70)

        if getattr(app.state, "property_store", None) is None:
            app.state.property_store = build_property_store(settings)

        property_store: PropertyStore = app.state.property_store
        if property_store.start():
            logger.info(f"[OK] Loaded {len(property_store.properties)} properties")
        else:
            logger.warning(f"[WARN] Initial load failed - continuing in degraded mode: {property_store.error}")

        yield
        logger.info("Shutting down...")

    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description=settings.PROJECT_DESCRIPTION,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.property_store = store

    # ==================== MIDDLEWARE ====================

    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["*"],
        max_age=3600,
    )

    # ==================== ROUTERS ====================

    app.include_router(properties_router, prefix=f"{settings.API_PREFIX}/properties", tags=["Properties"])
    app.include_router(saved_router, prefix=f"{settings.API_PREFIX}/saved", tags=["Saved"])

    # ==================== ERROR HANDLERS ====================

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle validation errors with detailed response"""
        logger.warning(f"Validation error on {request.url}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={
                "success": False,
                "detail": "Validation error",
                "errors": jsonable_errors(exc),
            },
        )

    @app.exception_handler(RentalsError)
    async def rentals_exception_handler(request: Request, exc: RentalsError):
        """Errors raised past the store, e.g. by a misbehaving dependency"""
        http_exc = store_error_to_http(exc)
        return JSONResponse(
            status_code=http_exc.status_code,
            content={"success": False, "detail": http_exc.detail},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle all unhandled exceptions"""
        logger.error(f"Unhandled exception: {exc}\n{traceback.format_exc()}")

        # Don't expose internal errors in production
        error_message = str(exc) if settings.DEBUG else "Internal server error"
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "detail": error_message,
                "timestamp": _now(),
            },
        )

    # ==================== HEALTH & STATUS ENDPOINTS ====================

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint - API information"""
        return {
            "success": True,
            "message": f"Welcome to {settings.PROJECT_NAME}",
            "version": settings.VERSION,
            "docs": "/api/docs",
        }

    @app.get("/health", tags=["System"])
    async def health_check(request: Request):
        """Health check; degraded when the store is unreachable or unconfigured"""
        property_store: Optional[PropertyStore] = request.app.state.property_store
        snapshot = property_store.snapshot() if property_store else {"error": "not initialized"}
        error = property_store.error if property_store else None

        return {
            "success": True,
            "status": "degraded" if snapshot["error"] else "healthy",
            "store": {
                "configured": settings.store_configured and not isinstance(error, ConfigurationError),
                **snapshot,
            },
            "timestamp": _now(),
        }

    return app


def jsonable_errors(exc: RequestValidationError):
    # ctx may hold the raw ValueError raised by a validator
    errors = []
    for error in exc.errors():
        error = dict(error)
        if "ctx" in error:
            error["ctx"] = {k: str(v) for k, v in error["ctx"].items()}
        errors.append(error)
    return errors


def _configure_logging() -> None:
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)


_configure_logging()
app = create_app()
