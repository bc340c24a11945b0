"""
SupportDesk - Main FastAPI Application

This is the entry point for the FastAPI application.
It configures middleware, routes, and lifecycle handlers.
"""

from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config.settings import settings
from .container import ServiceContainer, build_container
from .api.routes import api_router, pages_router
from .api.middleware import AccessGateMiddleware, CorrelationIdMiddleware, register_error_handlers
from .repositories.mongo_client import prepare_database
from .utils.logger import setup_logging, get_logger

# Setup logging first
setup_logging()
logger = get_logger(__name__)

VERSION = "1.0.0"


# =============================================================================
# Application Lifecycle
# =============================================================================

def _lifespan(container: Optional[ServiceContainer]):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan handler.

        Startup:
            - Builds the service container (unless one was injected)
            - Prepares MongoDB collections, indexes and pre-images

        Shutdown:
            - Closes database connections
        """
        logger.info("Starting SupportDesk...")
        owned = container is None
        app.state.container = build_container(settings) if owned else container

        if app.state.container.db is not None:
            try:
                await prepare_database(app.state.container.db)
            except Exception as e:
                logger.error(f"Failed to prepare database: {e}")

        logger.info("Application started successfully")

        yield

        logger.info("Shutting down...")
        if owned:
            app.state.container.close()
        logger.info("Application shutdown complete")

    return lifespan


# =============================================================================
# Application Factory
# =============================================================================

def create_app(container: Optional[ServiceContainer] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        container: Prebuilt services; the MongoDB-backed container is
            built at startup when omitted

    Returns:
        Configured FastAPI application instance
    """
    application = FastAPI(
        title="SupportDesk",
        description="Multi-role support ticketing with resolution notifications and AI summaries",
        version=VERSION,
        lifespan=_lifespan(container),
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
        openapi_url="/api/openapi.json" if settings.debug else None,
    )
    if container is not None:
        application.state.container = container

    _configure_middleware(application)
    register_error_handlers(application)
    _configure_routes(application)

    return application


def _configure_middleware(app: FastAPI) -> None:
    """Configure application middleware; the last one added runs first."""
    # allow_credentials must be False when allowing all origins
    allow_all = settings.cors_origins.strip() == "*"

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else settings.cors_origins_list,
        allow_credentials=not allow_all,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Correlation-Id"],
    )

    app.add_middleware(AccessGateMiddleware)
    app.add_middleware(CorrelationIdMiddleware)


def _configure_routes(app: FastAPI) -> None:
    """Configure application routes."""
    app.include_router(api_router, prefix="/api/v1")
    app.include_router(pages_router)

    @app.get("/health", tags=["Health"])
    async def health():
        """
        Health check endpoint.

        Returns application health status including database connectivity.
        """
        mongo_health = await app.state.container.health()
        return {
            "status": "healthy" if mongo_health.get("status") == "healthy" else "degraded",
            "version": VERSION,
            "environment": settings.environment,
            "mongo": mongo_health
        }


# =============================================================================
# Application Instance
# =============================================================================

app = create_app()
