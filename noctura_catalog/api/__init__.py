"""API layer module.

Contains FastAPI routers and request/response schemas.
"""

from noctura_catalog.api.categories import router as categories_router
from noctura_catalog.api.health import router as health_router
from noctura_catalog.api.products import router as products_router

__all__ = [
    "categories_router",
    "health_router",
    "products_router",
]
