"""Product Catalog.

Provides the catalog models, repositories, listing/search service and
the product ingestion pipeline.
"""

from noctura_catalog.catalog.ingestion import Attachment, ProductIngestionPipeline
from noctura_catalog.catalog.models import Category, Product
from noctura_catalog.catalog.repository import CategoryRepository, ProductRepository
from noctura_catalog.catalog.service import CatalogService, PaginatedResult, PaginationParams

__all__ = [
    # Models
    "Category",
    "Product",
    # Repository
    "CategoryRepository",
    "ProductRepository",
    # Service
    "CatalogService",
    "PaginatedResult",
    "PaginationParams",
    # Ingestion
    "Attachment",
    "ProductIngestionPipeline",
]
