"""
FastAPI application factory and configuration.

This module builds the PropTrail HTTP application. It is responsible for:
1.  **Middleware Setup**: CORS for browser clients.
2.  **Exception Handling**: global handlers so every error is structured JSON.
3.  **Routing**: mounting the history and property routers plus ``/health``.
4.  **Lifecycle**: creating the process-wide History Service on startup.

Design Pattern
--------------
An **Application Factory** (:func:`create_app`) lets tests spin up isolated
app instances and lets deployments pass their own service.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from proptrail import __version__
from proptrail.api.routers import history, properties
from proptrail.api.service_registry import HistoryServiceRegistry
from proptrail.core.errors import HistoryError, UnsupportedFormatError
from proptrail.core.settings import get_logger, load_settings
from proptrail.history import HistoryService

logger = get_logger("proptrail.api")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Initialize the history service before the first request."""
    logger.info("PropTrail API starting up")
    HistoryServiceRegistry.get_instance()
    yield
    logger.info("PropTrail API shutting down")


def create_app(service: HistoryService | None = None) -> FastAPI:
    """
    Construct and configure the PropTrail FastAPI application.

    Parameters
    ----------
    service:
        Optional service to install as the process-wide instance. When
        omitted, the current singleton is used (created on startup).
    """
    if service is not None:
        HistoryServiceRegistry.install(service)

    app = FastAPI(
        title="PropTrail API",
        description="Property event history, timelines and analytics",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -----------------------------------------------------------------------
    # Global Exception Handlers
    # -----------------------------------------------------------------------
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal Server Error",
                "detail": str(exc),
                "path": request.url.path,
            },
        )

    @app.exception_handler(HistoryError)
    async def history_error_handler(request: Request, exc: HistoryError) -> JSONResponse:
        logger.error("History error on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal Server Error", "detail": str(exc)},
        )

    @app.exception_handler(UnsupportedFormatError)
    async def format_error_handler(request: Request, exc: UnsupportedFormatError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={
                "error": "Bad Request",
                "detail": str(exc),
                "supported": list(exc.supported),
            },
        )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        """Map Python ValueErrors to HTTP 400 Bad Request."""
        return JSONResponse(
            status_code=400,
            content={"error": "Bad Request", "detail": str(exc)},
        )

    # -----------------------------------------------------------------------
    # Routes
    # -----------------------------------------------------------------------
    app.include_router(history.router)
    app.include_router(properties.router)

    @app.get("/health", tags=["System"])
    async def health_check() -> dict[str, str]:
        """Simple liveness probe."""
        return {
            "status": "ok",
            "environment": load_settings().environment,
            "version": __version__,
        }

    return app


__all__ = ["create_app", "lifespan"]
