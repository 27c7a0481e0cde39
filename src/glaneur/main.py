"""
Main FastAPI application entry point.

Uses Application Factory Pattern.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.exceptions import HTTPException as StarletteHTTPException

from glaneur.config.settings import Settings, get_settings
from glaneur.di.container import initialize_container, shutdown_container
from glaneur.domain.exceptions import GlaneurException
from glaneur.infrastructure.monitoring import get_logger, setup_logging
from glaneur.presentation.api.middleware import (
    MetricsMiddleware,
    RequestIDMiddleware,
    glaneur_exception_handler,
    http_exception_handler,
    request_validation_handler,
    unhandled_exception_handler,
)
from glaneur.presentation.api.routes import auth, collect, health

API_PREFIX = "/api/v1"


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Application factory - creates and configures FastAPI app.

    Args:
        settings: Optional Settings instance (for testing)

    Returns:
        Configured FastAPI application
    """
    if settings is None:
        settings = get_settings()

    # Structured logging (JSON only in production)
    setup_logging(level=settings.LOG_LEVEL, json_logs=settings.ENV == "production")
    logger = get_logger(__name__)

    logger.info(f"Creating Glaneur application (ENV={settings.ENV})")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Connect resources and start the reconciliation sweeper."""
        logger.info("Starting Glaneur application...")
        await initialize_container()
        logger.info("Glaneur application started successfully")

        yield

        logger.info("Shutting down Glaneur application...")
        await shutdown_container()
        logger.info("Glaneur application shutdown complete")

    app = FastAPI(
        title="Glaneur API",
        description="Wallet sign-in and free compressed collectibles",
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )

    # Middleware chain (last added runs first)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(
        GZipMiddleware,
        minimum_size=1000,
        compresslevel=6,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Api-Version", "Retry-After"],
    )

    # Exception handlers
    app.add_exception_handler(GlaneurException, glaneur_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Routes
    app.include_router(auth.router, prefix=API_PREFIX)
    app.include_router(collect.router, prefix=API_PREFIX)
    app.include_router(health.router)

    if settings.METRICS_ENABLED:

        @app.get("/metrics", tags=["Monitoring"], include_in_schema=False)
        async def metrics():
            """Prometheus metrics in text format for scraping."""
            return Response(
                content=generate_latest(),
                media_type=CONTENT_TYPE_LATEST,
            )

    logger.info("Glaneur application created successfully")
    return app


def get_app() -> FastAPI:
    """
    Get or create application instance (lazy initialization).

    For uvicorn: uvicorn glaneur.main:get_app --factory
    """
    return create_app()


_app: Optional[FastAPI] = None


def __getattr__(name: str):
    """Lazy `app` attribute for: uvicorn glaneur.main:app"""
    global _app
    if name == "app":
        if _app is None:
            _app = create_app()
        return _app
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


def main():
    """Run the application with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "glaneur.main:get_app",
        factory=True,
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.API_RELOAD,
    )


if __name__ == "__main__":
    main()
