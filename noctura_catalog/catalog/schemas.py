"""Input contracts for catalog writes.

Pydantic models validating the fields accepted by the repositories.
Both creation and replacement go through these models so the same
constraints hold on every write path.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from noctura_catalog.domain.exceptions import ValidationError


def normalize_colors(value: Any) -> list[str]:
    """Normalize colors given as a list or a comma-separated string.

    Entries are trimmed and empty entries dropped; order is kept.
    """
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, (list, tuple)):
        raise ValueError("colors must be a list of strings or a comma-separated string")
    colors = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError("colors must contain only strings")
        item = item.strip()
        if item:
            colors.append(item)
    return colors


def to_validation_error(exc: PydanticValidationError, message: str) -> ValidationError:
    """Convert a pydantic error into a catalog ``ValidationError``."""
    errors = [
        {
            "field": ".".join(str(part) for part in err["loc"]) or "body",
            "message": err["msg"],
        }
        for err in exc.errors()
    ]
    return ValidationError(message, errors=errors)


# ============================================================================
# Product
# ============================================================================


class ProductCreate(BaseModel):
    """Fields of a new product."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    name: str = Field(..., min_length=2, max_length=200)
    description: str = Field(..., min_length=1)
    price: float = Field(..., ge=0, allow_inf_nan=False)
    category: str = Field(..., min_length=1, max_length=100)
    colors: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    width: str = ""
    height: str = ""
    thickness: str = ""
    material: str = ""

    @field_validator("colors", mode="before")
    @classmethod
    def _normalize_colors(cls, value: Any) -> list[str]:
        return normalize_colors(value)


class ProductUpdate(BaseModel):
    """Subset of product fields to overwrite.

    Only fields present in the payload are applied; required fields may be
    omitted but never set to null.
    """

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    name: str | None = Field(default=None, min_length=2, max_length=200)
    description: str | None = Field(default=None, min_length=1)
    price: float | None = Field(default=None, ge=0, allow_inf_nan=False)
    category: str | None = Field(default=None, min_length=1, max_length=100)
    colors: list[str] | None = None
    images: list[str] | None = None
    width: str | None = None
    height: str | None = None
    thickness: str | None = None
    material: str | None = None

    @field_validator("name", "description", "price", "category", "colors", "images")
    @classmethod
    def _not_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("field cannot be null")
        return value

    @field_validator("colors", mode="before")
    @classmethod
    def _normalize_colors(cls, value: Any) -> Any:
        if value is None:
            return None
        return normalize_colors(value)

    def changes(self) -> dict[str, Any]:
        """Fields explicitly present in the payload."""
        return self.model_dump(exclude_unset=True)


# ============================================================================
# Category
# ============================================================================


class CategoryCreate(BaseModel):
    """Fields of a new category."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    name: str = Field(..., min_length=1, max_length=100)
