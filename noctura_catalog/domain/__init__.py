"""Domain layer.

Error taxonomy shared by the catalog core and the API layer.
"""

from noctura_catalog.domain.exceptions import (
    CatalogError,
    InvalidIdentifierError,
    MissingFieldsError,
    MissingSearchTermError,
    NotFoundError,
    StoreFailureError,
    UploadFailureError,
    ValidationError,
)

__all__ = [
    "CatalogError",
    "InvalidIdentifierError",
    "MissingFieldsError",
    "MissingSearchTermError",
    "NotFoundError",
    "StoreFailureError",
    "UploadFailureError",
    "ValidationError",
]
