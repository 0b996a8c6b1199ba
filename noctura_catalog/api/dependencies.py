"""FastAPI dependencies shared by the catalog routers."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from noctura_catalog.catalog.ingestion import ProductIngestionPipeline
from noctura_catalog.catalog.repository import CategoryRepository, ProductRepository
from noctura_catalog.catalog.service import CatalogService
from noctura_catalog.infrastructure.database import get_session
from noctura_catalog.infrastructure.object_store import (
    ObjectStore,
    ObjectStoreClient,
    ObjectStoreConfig,
)

SessionDep = Annotated[AsyncSession, Depends(get_session)]


def get_catalog_service(session: SessionDep) -> CatalogService:
    """Get catalog service bound to the request session."""
    return CatalogService(session)


def get_product_repository(session: SessionDep) -> ProductRepository:
    """Get product repository bound to the request session."""
    return ProductRepository(session)


def get_category_repository(session: SessionDep) -> CategoryRepository:
    """Get category repository bound to the request session."""
    return CategoryRepository(session)


async def get_object_store(request: Request) -> AsyncGenerator[ObjectStore, None]:
    """Get object store client with request ID, closed after the request."""
    request_id = getattr(request.state, "request_id", None)
    async with ObjectStoreClient(ObjectStoreConfig.from_settings(), request_id=request_id) as client:
        yield client


def get_ingestion_pipeline(
    repository: Annotated[ProductRepository, Depends(get_product_repository)],
    object_store: Annotated[ObjectStore, Depends(get_object_store)],
) -> ProductIngestionPipeline:
    """Get product ingestion pipeline."""
    return ProductIngestionPipeline(repository, object_store)
