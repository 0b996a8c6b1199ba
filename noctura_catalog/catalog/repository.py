"""Catalog repositories for database operations.

Provides CRUD operations for products and categories, plus the
filtered listing primitives used by the catalog service.
"""

from collections.abc import Sequence
from typing import Any
from uuid import UUID

import structlog
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import ColumnElement, Executable, Result, and_, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from noctura_catalog.catalog.models import Category, Product
from noctura_catalog.catalog.schemas import (
    CategoryCreate,
    ProductCreate,
    ProductUpdate,
    to_validation_error,
)
from noctura_catalog.domain.exceptions import (
    InvalidIdentifierError,
    NotFoundError,
    StoreFailureError,
)

logger = structlog.get_logger()

LIKE_ESCAPE = "\\"


def escape_like(term: str) -> str:
    """Escape ``LIKE`` wildcards so the term matches literally.

    Args:
        term: Raw user input.

    Returns:
        Term with ``\\``, ``%`` and ``_`` prefixed by the escape character.
    """
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def parse_identifier(value: str) -> str:
    """Return the canonical form of an entity identifier.

    Raises:
        InvalidIdentifierError: If the value is not a UUID.
    """
    try:
        return str(UUID(value))
    except (ValueError, TypeError, AttributeError):
        raise InvalidIdentifierError(str(value)) from None


class BaseRepository:
    """Session-bound repository base.

    Every statement goes through ``_execute`` or ``_flush`` so driver
    failures surface as ``StoreFailureError`` tagged with the operation.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def _execute(self, query: Executable, operation: str) -> Result[Any]:
        try:
            return await self.session.execute(query)
        except SQLAlchemyError as e:
            raise self._store_failure(operation, e) from e

    async def _flush(self, operation: str) -> None:
        try:
            await self.session.flush()
        except SQLAlchemyError as e:
            raise self._store_failure(operation, e) from e

    def _store_failure(self, operation: str, error: Exception) -> StoreFailureError:
        logger.error("Store operation failed", operation=operation, error=str(error))
        return StoreFailureError(operation, str(error))


class ProductRepository(BaseRepository):
    """Repository for Product database operations.

    Handles all database interactions for products including
    filtering, sorting, and pagination.

    Example usage:
        async with async_session_factory() as session:
            repo = ProductRepository(session)
            products = await repo.find_all(category="sillas", limit=6)
    """

    async def create(self, fields: dict[str, Any] | ProductCreate) -> Product:
        """Insert a product.

        Args:
            fields: Product fields, validated against ``ProductCreate``.

        Returns:
            Stored product with its id and timestamps.

        Raises:
            ValidationError: If a field is absent or out of constraint.
        """
        if not isinstance(fields, ProductCreate):
            try:
                fields = ProductCreate.model_validate(fields)
            except PydanticValidationError as e:
                raise to_validation_error(e, "Invalid product") from e

        product = Product(**fields.model_dump())
        self.session.add(product)
        await self._flush("create_product")
        return product

    async def get_by_id(self, product_id: str) -> Product:
        """Get product by ID.

        Raises:
            InvalidIdentifierError: If the id is malformed.
            NotFoundError: If no product has this id.
        """
        product = await self._first(Product.id == parse_identifier(product_id), "get_product")
        if product is None:
            raise NotFoundError("Product", "id", product_id)
        return product

    async def get_by_name(self, name: str) -> Product:
        """Get product by exact name.

        When several products share a name the oldest one wins.

        Raises:
            NotFoundError: If no product has this name.
        """
        product = await self._first(Product.name == name, "get_product_by_name")
        if product is None:
            raise NotFoundError("Product", "name", name)
        return product

    async def replace_by_id(self, product_id: str, fields: dict[str, Any]) -> Product:
        """Overwrite fields of the product with this id."""
        product = await self.get_by_id(product_id)
        return await self._apply(product, fields)

    async def replace_by_name(self, name: str, fields: dict[str, Any]) -> Product:
        """Overwrite fields of the first product with this name."""
        product = await self.get_by_name(name)
        return await self._apply(product, fields)

    async def delete_by_id(self, product_id: str) -> Product:
        """Delete the product with this id and return it."""
        product = await self.get_by_id(product_id)
        await self.session.delete(product)
        await self._flush("delete_product")
        return product

    async def delete_by_name(self, name: str) -> Product:
        """Delete the first product with this name and return it."""
        product = await self.get_by_name(name)
        await self.session.delete(product)
        await self._flush("delete_product")
        return product

    async def find_all(
        self,
        category: str | None = None,
        search: str | None = None,
        limit: int = 6,
        offset: int = 0,
    ) -> Sequence[Product]:
        """Find products with filtering, newest first, and pagination.

        Args:
            category: Case-insensitive exact category label.
            search: Case-insensitive substring of the name.
            limit: Maximum results.
            offset: Result offset for pagination.

        Returns:
            Sequence of matching products.
        """
        query = select(Product)

        conditions = self._conditions(category, search)
        if conditions:
            query = query.where(and_(*conditions))

        query = query.order_by(Product.created_at.desc(), Product.id.desc())
        query = query.limit(limit).offset(offset)

        result = await self._execute(query, "find_products")
        return result.scalars().all()

    async def count(
        self,
        category: str | None = None,
        search: str | None = None,
    ) -> int:
        """Count products matching filters.

        Args:
            category: Case-insensitive exact category label.
            search: Case-insensitive substring of the name.

        Returns:
            Count of matching products.
        """
        query = select(func.count(Product.id))

        conditions = self._conditions(category, search)
        if conditions:
            query = query.where(and_(*conditions))

        result = await self._execute(query, "count_products")
        return result.scalar_one()

    def _conditions(
        self,
        category: str | None,
        search: str | None,
    ) -> list[ColumnElement[bool]]:
        """Build filter conditions.

        Category uses an anchored pattern (no wildcards), so it matches the
        whole label; search wraps the escaped term in ``%``.
        """
        conditions = []
        if category is not None:
            conditions.append(
                Product.category.ilike(escape_like(category), escape=LIKE_ESCAPE)
            )
        if search is not None:
            conditions.append(
                Product.name.ilike(f"%{escape_like(search)}%", escape=LIKE_ESCAPE)
            )
        return conditions

    async def _apply(self, product: Product, fields: dict[str, Any]) -> Product:
        try:
            changes = ProductUpdate.model_validate(fields).changes()
        except PydanticValidationError as e:
            raise to_validation_error(e, "Invalid product update") from e

        for key, value in changes.items():
            setattr(product, key, value)
        await self._flush("update_product")
        return product

    async def _first(self, condition: ColumnElement[bool], operation: str) -> Product | None:
        query = (
            select(Product)
            .where(condition)
            .order_by(Product.created_at.asc(), Product.id.asc())
            .limit(1)
        )
        result = await self._execute(query, operation)
        return result.scalars().first()


class CategoryRepository(BaseRepository):
    """Repository for Category database operations."""

    async def create(self, fields: dict[str, Any] | CategoryCreate) -> Category:
        """Insert a category.

        Raises:
            ValidationError: If the name is missing or blank.
        """
        if not isinstance(fields, CategoryCreate):
            try:
                fields = CategoryCreate.model_validate(fields)
            except PydanticValidationError as e:
                raise to_validation_error(e, "Invalid category") from e

        category = Category(name=fields.name)
        self.session.add(category)
        await self._flush("create_category")
        return category

    async def find_all(self) -> Sequence[Category]:
        """List every category, oldest first."""
        query = select(Category).order_by(Category.created_at.asc(), Category.id.asc())
        result = await self._execute(query, "list_categories")
        return result.scalars().all()

    async def get_by_name(self, name: str) -> Category:
        """Get the first category with this exact name.

        Raises:
            NotFoundError: If no category has this name.
        """
        query = (
            select(Category)
            .where(Category.name == name)
            .order_by(Category.created_at.asc(), Category.id.asc())
            .limit(1)
        )
        result = await self._execute(query, "get_category")
        category = result.scalars().first()
        if category is None:
            raise NotFoundError("Category", "name", name)
        return category

    async def delete_by_name(self, name: str) -> Category:
        """Delete the first category with this name and return it."""
        category = await self.get_by_name(name)
        await self.session.delete(category)
        await self._flush("delete_category")
        return category
