"""Catalog API main application module.

This module initializes the FastAPI application and configures
core middleware, routers, exception handlers and startup/shutdown events.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI

from noctura_catalog.api.categories import router as categories_router
from noctura_catalog.api.errors import register_exception_handlers
from noctura_catalog.api.health import router as health_router
from noctura_catalog.api.middleware import setup_middleware
from noctura_catalog.api.products import router as products_router
from noctura_catalog.infrastructure.config import settings
from noctura_catalog.infrastructure.database import engine
from noctura_catalog.infrastructure.logging_config import configure_logging

configure_logging()

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    logger.info(
        "Starting Noctura catalog API",
        version=settings.api_version,
        debug=settings.debug,
        cors_origins=settings.cors_origins,
    )

    yield

    logger.info("Shutting down Noctura catalog API")
    await engine.dispose()


app = FastAPI(
    title="Noctura Catalog API",
    description="Furniture catalog: products, categories, search and image uploads",
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Setup middleware (CORS, request ID, body size limit, error handling)
setup_middleware(app)

# Map catalog errors to the standard error envelope
register_exception_handlers(app)

# Include routers
app.include_router(health_router, tags=["Health"])
app.include_router(products_router)
app.include_router(categories_router)
