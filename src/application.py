"""FastAPI application factory and bootstrap helpers."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.routes import include_api_routes
from src.config import settings
from src.services.catalog.cache import CatalogCache, get_redis_client
from src.services.catalog.client import CatalogUnavailableError, get_catalog_client

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events."""
    if settings.is_production:
        # Warm the snapshot before serving traffic
        cache = CatalogCache(get_redis_client(), get_catalog_client())
        try:
            products = await cache.refresh()
            logger.info("Warmed catalog snapshot with %d products", len(products))
        except CatalogUnavailableError:
            logger.exception("Failed warming catalog snapshot on startup")
    else:
        logger.info("Skipping catalog warm-up in development mode")

    yield


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="Marketplace Product Discovery",
        description="Search, filter and browse the handcrafted product catalog",
        version="1.0.0",
        lifespan=lifespan,
    )

    _configure_cors(app)
    include_api_routes(app)

    return app


def _configure_cors(app: FastAPI) -> None:
    """Allow broad access in non-production environments."""

    if settings.is_production:
        return

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
