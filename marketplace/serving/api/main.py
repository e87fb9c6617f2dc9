"""
FastAPI Application Factory

Creates and configures the marketplace API. The lifespan owns the database
handle and the catalog client; both are reachable from ``app.state``.
"""

from contextlib import asynccontextmanager
from typing import Optional

import httpx
import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from marketplace.config import Settings, get_settings
from marketplace.config.logging import configure_logging
from marketplace.database.connection import Database
from marketplace.serving.api.errors import register_error_handlers
from marketplace.serving.api.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from marketplace.serving.api.routes import (
    games_router,
    health_router,
    orders_router,
    products_router,
    reviews_router,
    users_router,
)
from marketplace.services.catalog import FreeToGameClient

logger = structlog.get_logger(__name__)


def create_api_app(
    settings: Optional[Settings] = None,
    catalog_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        settings: Application settings (cached environment settings when omitted)
        catalog_transport: Transport for the FreeToGame client, used by tests

    Returns:
        Configured FastAPI app instance
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings=settings)
        logger.info("Starting Marketplace API", environment=settings.app_env)

        # A store that cannot be set up is fatal
        database = Database(settings.database)
        await database.init()

        catalog = FreeToGameClient(settings.catalog, transport=catalog_transport)

        app.state.database = database
        app.state.catalog = catalog

        yield

        logger.info("Shutting down...")
        await catalog.close()
        await database.close()

    app = FastAPI(
        title="Marketplace API",
        description="Products, users, orders, reviews and free-to-play games",
        version=settings.version,
        # Tracebacks in responses are never allowed in production
        debug=settings.debug and not settings.is_production,
        docs_url="/api-docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.security.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)

    register_error_handlers(app)

    app.include_router(health_router, tags=["Health"])
    app.include_router(products_router, prefix="/products", tags=["Products"])
    app.include_router(users_router, prefix="/users", tags=["Users"])
    app.include_router(orders_router, prefix="/orders", tags=["Orders"])
    app.include_router(reviews_router, prefix="/reviews", tags=["Reviews"])
    app.include_router(games_router, prefix="/f2p-games", tags=["Free-to-Play Games"])

    return app
