"""Product API endpoints.

Provides paginated listing, category filtering, name search, detail
lookups and product creation, update and deletion.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query, Request, status
from starlette.datastructures import UploadFile

from noctura_catalog.api.dependencies import (
    get_catalog_service,
    get_ingestion_pipeline,
    get_product_repository,
)
from noctura_catalog.api.schemas import (
    ErrorResponse,
    ProductDeletedResponse,
    ProductListResponse,
    ProductSchema,
)
from noctura_catalog.catalog.ingestion import Attachment, ProductIngestionPipeline
from noctura_catalog.catalog.models import Product
from noctura_catalog.catalog.repository import ProductRepository
from noctura_catalog.catalog.service import (
    CatalogService,
    PaginatedResult,
    PaginationParams,
    project_detail,
)
from noctura_catalog.domain.exceptions import ValidationError
from noctura_catalog.infrastructure.config import settings

router = APIRouter(prefix="/products", tags=["Products"])


# ============================================================================
# Dependencies
# ============================================================================


def get_pagination(
    page: str | None = Query(default=None, description="Page number (1-based, default 1)"),
    limit: str | None = Query(default=None, description="Items per page (default 6)"),
) -> PaginationParams:
    """Parse pagination query values; invalid values fall back to defaults."""
    return PaginationParams.parse(page, limit)


ServiceDep = Annotated[CatalogService, Depends(get_catalog_service)]
RepositoryDep = Annotated[ProductRepository, Depends(get_product_repository)]
PaginationDep = Annotated[PaginationParams, Depends(get_pagination)]


# ============================================================================
# Converters
# ============================================================================


def page_to_response(result: PaginatedResult[dict[str, Any]]) -> ProductListResponse:
    """Convert a paginated result to the listing envelope."""
    return ProductListResponse.model_validate(result.to_envelope())


def product_to_response(product: Product) -> ProductSchema:
    """Convert Product model to response schema."""
    return ProductSchema.model_validate(project_detail(product))


async def read_attachment(upload: UploadFile) -> Attachment:
    """Read an uploaded file; files over the per-file cap stay unread."""
    filename = upload.filename or "upload"
    if upload.size is not None and upload.size > settings.max_upload_file_bytes:
        return Attachment(
            filename=filename,
            content=b"",
            content_type=upload.content_type,
            declared_size=upload.size,
        )
    return Attachment(
        filename=filename,
        content=await upload.read(),
        content_type=upload.content_type,
    )


async def read_creation_request(request: Request) -> tuple[dict[str, Any], list[Attachment]]:
    """Extract scalar fields and image attachments from a creation request.

    Multipart forms carry attachments under ``settings.upload_field_name``;
    a JSON body is accepted for products without images.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            raise ValidationError("Request body is not valid JSON") from None
        if not isinstance(body, dict):
            raise ValidationError("Request body must be a JSON object")
        return body, []

    form = await request.form()
    fields: dict[str, Any] = {}
    attachments: list[Attachment] = []

    for key in form.keys():
        values = form.getlist(key)
        if key == settings.upload_field_name:
            for value in values:
                if isinstance(value, UploadFile):
                    attachments.append(await read_attachment(value))
            continue

        text_values = [v for v in values if isinstance(v, str)]
        if key == "colors" and len(text_values) > 1:
            fields[key] = text_values
        elif text_values:
            fields[key] = text_values[0]

    return fields, attachments


# ============================================================================
# Endpoints
# ============================================================================


@router.get(
    "",
    response_model=ProductListResponse,
    summary="List products",
    description="Get a page of products, newest first.",
)
async def list_products(
    service: ServiceDep,
    pagination: PaginationDep,
) -> ProductListResponse:
    """List products with pagination.

    Args:
        service: Catalog service.
        pagination: Page and limit.

    Returns:
        Paginated list of product summaries.
    """
    return page_to_response(await service.list_products(pagination))


@router.get(
    "/search",
    response_model=ProductListResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Search products",
    description="Case-insensitive substring search on product names.",
)
async def search_products(
    service: ServiceDep,
    pagination: PaginationDep,
    q: str | None = Query(default=None, description="Search term"),
) -> ProductListResponse:
    """Search products by name.

    Args:
        service: Catalog service.
        pagination: Page and limit.
        q: Search term, matched literally.

    Returns:
        Paginated list of matching product summaries.
    """
    return page_to_response(await service.search(q, pagination))


@router.get(
    "/categoria/{category}",
    response_model=ProductListResponse,
    summary="List products by category",
    description="Products whose category equals the given label, ignoring case.",
)
async def list_products_by_category(
    category: str,
    service: ServiceDep,
    pagination: PaginationDep,
) -> ProductListResponse:
    """List products of one category."""
    return page_to_response(await service.list_by_category(category, pagination))


@router.get(
    "/nombre/{name}",
    response_model=ProductSchema,
    responses={404: {"model": ErrorResponse}},
    summary="Get product by name",
)
async def get_product_by_name(name: str, service: ServiceDep) -> ProductSchema:
    """Get the full record of a product by exact name."""
    return ProductSchema.model_validate(await service.get_product_by_name(name))


@router.get(
    "/{product_id}",
    response_model=ProductSchema,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Get product details",
)
async def get_product(product_id: str, service: ServiceDep) -> ProductSchema:
    """Get the full record of a product by id.

    Raises:
        InvalidIdentifierError: If the id is malformed (400).
        NotFoundError: If no product has this id (404).
    """
    return ProductSchema.model_validate(await service.get_product(product_id))


@router.post(
    "",
    response_model=ProductSchema,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    summary="Create product",
    description="Create a product from form fields and image attachments.",
)
async def create_product(
    request: Request,
    pipeline: Annotated[ProductIngestionPipeline, Depends(get_ingestion_pipeline)],
) -> ProductSchema:
    """Create a product.

    Images are uploaded to the object store first; the product is only
    stored when every upload succeeded.

    Args:
        request: Incoming multipart (or JSON) request.
        pipeline: Ingestion pipeline.

    Returns:
        The created product.
    """
    fields, attachments = await read_creation_request(request)
    product = await pipeline.create_product(fields, attachments)
    return product_to_response(product)


@router.put(
    "/nombre/{name}",
    response_model=ProductSchema,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Update product by name",
)
async def update_product_by_name(
    name: str,
    repository: RepositoryDep,
    updates: dict[str, Any] = Body(...),
) -> ProductSchema:
    """Overwrite the fields present in the body."""
    return product_to_response(await repository.replace_by_name(name, updates))


@router.put(
    "/id/{product_id}",
    response_model=ProductSchema,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Update product by id",
)
async def update_product_by_id(
    product_id: str,
    repository: RepositoryDep,
    updates: dict[str, Any] = Body(...),
) -> ProductSchema:
    """Overwrite the fields present in the body."""
    return product_to_response(await repository.replace_by_id(product_id, updates))


@router.delete(
    "/nombre/{name}",
    response_model=ProductDeletedResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Delete product by name",
)
async def delete_product_by_name(name: str, repository: RepositoryDep) -> ProductDeletedResponse:
    """Delete a product by exact name."""
    deleted = await repository.delete_by_name(name)
    return ProductDeletedResponse(
        message="Product deleted",
        deleted=product_to_response(deleted),
    )


@router.delete(
    "/id/{product_id}",
    response_model=ProductDeletedResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Delete product by id",
)
async def delete_product_by_id(product_id: str, repository: RepositoryDep) -> ProductDeletedResponse:
    """Delete a product by id."""
    deleted = await repository.delete_by_id(product_id)
    return ProductDeletedResponse(
        message="Product deleted",
        deleted=product_to_response(deleted),
    )
