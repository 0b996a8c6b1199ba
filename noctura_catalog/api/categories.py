"""Category API endpoints.

Categories are a flat label vocabulary: list, create and delete by name.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, status

from noctura_catalog.api.dependencies import get_category_repository
from noctura_catalog.api.schemas import (
    CategoryDeletedResponse,
    CategoryListResponse,
    CategorySchema,
    ErrorResponse,
)
from noctura_catalog.catalog.repository import CategoryRepository

router = APIRouter(prefix="/categorias", tags=["Categories"])

RepositoryDep = Annotated[CategoryRepository, Depends(get_category_repository)]


@router.get(
    "",
    response_model=CategoryListResponse,
    summary="List categories",
)
async def list_categories(repository: RepositoryDep) -> CategoryListResponse:
    """List every category."""
    categories = await repository.find_all()
    return CategoryListResponse(
        categories=[CategorySchema.model_validate(c) for c in categories]
    )


@router.post(
    "",
    response_model=CategorySchema,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
    summary="Create category",
)
async def create_category(
    repository: RepositoryDep,
    payload: dict[str, Any] = Body(...),
) -> CategorySchema:
    """Create a category from ``{"name": ...}``."""
    category = await repository.create(payload)
    return CategorySchema.model_validate(category)


@router.delete(
    "/nombre/{name}",
    response_model=CategoryDeletedResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Delete category by name",
)
async def delete_category(name: str, repository: RepositoryDep) -> CategoryDeletedResponse:
    """Delete the first category with this exact name."""
    deleted = await repository.delete_by_name(name)
    return CategoryDeletedResponse(
        message="Category deleted",
        deleted=CategorySchema.model_validate(deleted),
    )
