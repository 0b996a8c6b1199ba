"""API schemas for the catalog API.

Pydantic models for response validation and serialization.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: str | None = Field(default=None, description="Field that caused the error")
    message: str = Field(..., description="Error message")


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: list[ErrorDetail] = Field(
        default_factory=list, description="Additional error details"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


# ============================================================================
# Product Schemas
# ============================================================================


class ProductSummarySchema(BaseModel):
    """Product as shown in list views."""

    id: str = Field(..., description="Unique product identifier")
    name: str = Field(..., description="Product name")
    price: float = Field(..., description="Price in local currency")
    description: str = Field(..., description="Commercial description")
    image: str | None = Field(default=None, description="Thumbnail URL (first image)")


class ProductSchema(BaseModel):
    """Full product record, returned by detail lookups and writes."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str = Field(..., description="Unique product identifier")
    name: str = Field(..., description="Product name")
    description: str = Field(..., description="Commercial description")
    price: float = Field(..., description="Price in local currency")
    category: str = Field(..., description="Category label")
    colors: list[str] = Field(default_factory=list, description="Available colors")
    images: list[str] = Field(default_factory=list, description="Image URLs, thumbnail first")
    width: str | None = Field(default=None, description="Width")
    height: str | None = Field(default=None, description="Height")
    thickness: str | None = Field(default=None, description="Thickness")
    material: str | None = Field(default=None, description="Material")
    created_at: datetime = Field(..., alias="createdAt", description="When the product was created")
    updated_at: datetime = Field(..., alias="updatedAt", description="When the product was last updated")


class ProductListResponse(BaseModel):
    """Paginated product listing."""

    model_config = ConfigDict(populate_by_name=True)

    products: list[ProductSummarySchema] = Field(..., description="Products on this page")
    total: int = Field(..., description="Count of all matching products")
    page: int = Field(..., description="Current page number (1-based)")
    limit: int = Field(..., description="Items per page")
    total_pages: int = Field(..., alias="totalPages", description="Number of pages")


class ProductDeletedResponse(BaseModel):
    """Confirmation of a product deletion."""

    message: str
    deleted: ProductSchema


# ============================================================================
# Category Schemas
# ============================================================================


class CategorySchema(BaseModel):
    """Category record."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str = Field(..., description="Unique category identifier")
    name: str = Field(..., description="Category label")
    created_at: datetime = Field(..., alias="createdAt", description="When the category was created")
    updated_at: datetime = Field(..., alias="updatedAt", description="When the category was last updated")


class CategoryListResponse(BaseModel):
    """All categories."""

    categories: list[CategorySchema]


class CategoryDeletedResponse(BaseModel):
    """Confirmation of a category deletion."""

    message: str
    deleted: CategorySchema
