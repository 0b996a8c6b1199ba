"""Catalog service for listing and lookup operations.

High-level service that combines repository operations with the
pagination contract and the list/detail projection policy.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from noctura_catalog.catalog.models import Product
from noctura_catalog.catalog.repository import ProductRepository
from noctura_catalog.domain.exceptions import MissingSearchTermError
from noctura_catalog.infrastructure.config import settings

T = TypeVar("T")

logger = structlog.get_logger()

# Largest value a 64-bit SQL integer bind accepts.
MAX_SQL_INT = 2**63 - 1


def parse_positive_int(value: Any, default: int) -> int:
    """Parse a query value as a positive integer.

    Anything that is not a positive integer, or does not fit a 64-bit
    SQL integer, falls back to ``default`` instead of raising.
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        parsed = int(str(value).strip())
    except ValueError:
        return default
    return parsed if 0 < parsed <= MAX_SQL_INT else default


@dataclass
class PaginationParams:
    """Pagination parameters.

    Attributes:
        page: Page number (1-indexed).
        limit: Items per page.
    """

    page: int = 1
    limit: int = 6

    @classmethod
    def parse(cls, page: Any = None, limit: Any = None) -> "PaginationParams":
        """Build parameters from raw query values, applying defaults."""
        return cls(
            page=parse_positive_int(page, settings.default_page),
            limit=parse_positive_int(limit, settings.default_page_size),
        )

    @property
    def offset(self) -> int:
        """Calculate offset from page number."""
        return (self.page - 1) * self.limit


@dataclass
class PaginatedResult(Generic[T]):
    """Paginated result container.

    Attributes:
        items: Items on the current page.
        total: Count of all matching items.
        page: Current page.
        limit: Items per page.
    """

    items: list[T]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        """Calculate total pages."""
        return math.ceil(self.total / self.limit)

    def to_envelope(self) -> dict[str, Any]:
        """Render the listing envelope shared by every list endpoint."""
        return {
            "products": self.items,
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
            "totalPages": self.total_pages,
        }


def project_summary(product: Product) -> dict[str, Any]:
    """List-view projection: name, price, description and thumbnail only."""
    return {
        "id": product.id,
        "name": product.name,
        "price": product.price,
        "description": product.description,
        "image": product.thumbnail,
    }


def project_detail(product: Product) -> dict[str, Any]:
    """Detail-view projection: the full record."""
    return {
        "id": product.id,
        "name": product.name,
        "description": product.description,
        "price": product.price,
        "category": product.category,
        "colors": list(product.colors or []),
        "images": list(product.images or []),
        "width": product.width,
        "height": product.height,
        "thickness": product.thickness,
        "material": product.material,
        "created_at": product.created_at,
        "updated_at": product.updated_at,
    }


class CatalogService:
    """Service for catalog listing and lookups.

    Example usage:
        async with async_session_factory() as session:
            service = CatalogService(session)
            page = await service.search("silla", PaginationParams(page=1))
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize service with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session
        self.repository = ProductRepository(session)

    async def list_products(
        self,
        pagination: PaginationParams,
    ) -> PaginatedResult[dict[str, Any]]:
        """List every product, newest first."""
        return await self._paginate(pagination)

    async def list_by_category(
        self,
        category: str,
        pagination: PaginationParams,
    ) -> PaginatedResult[dict[str, Any]]:
        """List products whose category equals ``category``, ignoring case."""
        return await self._paginate(pagination, category=category)

    async def search(
        self,
        term: str | None,
        pagination: PaginationParams,
    ) -> PaginatedResult[dict[str, Any]]:
        """List products whose name contains ``term``, ignoring case.

        Raises:
            MissingSearchTermError: If the term is missing or blank.
        """
        if term is None or not term.strip():
            raise MissingSearchTermError()
        return await self._paginate(pagination, search=term)

    async def get_product(self, product_id: str) -> dict[str, Any]:
        """Get the full record of a product by id."""
        return project_detail(await self.repository.get_by_id(product_id))

    async def get_product_by_name(self, name: str) -> dict[str, Any]:
        """Get the full record of a product by exact name."""
        return project_detail(await self.repository.get_by_name(name))

    async def _paginate(
        self,
        pagination: PaginationParams,
        category: str | None = None,
        search: str | None = None,
    ) -> PaginatedResult[dict[str, Any]]:
        total = await self.repository.count(category=category, search=search)

        # Page and limit may each fit an integer bind while their product does
        # not; pages past the end are empty without querying.
        offset = pagination.offset
        products: Sequence[Product] = []
        if offset < total:
            products = await self.repository.find_all(
                category=category,
                search=search,
                limit=min(pagination.limit, total - offset),
                offset=offset,
            )

        logger.debug(
            "Catalog page fetched",
            category=category,
            search=search,
            page=pagination.page,
            limit=pagination.limit,
            total=total,
        )

        return PaginatedResult(
            items=[project_summary(p) for p in products],
            total=total,
            page=pagination.page,
            limit=pagination.limit,
        )
