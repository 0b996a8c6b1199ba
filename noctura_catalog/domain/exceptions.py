"""Domain exceptions.

All catalog-level errors raised by the repositories, the ingestion
pipeline and the listing engine. The API layer maps each class to an
HTTP status and a machine-readable error code.
"""

from typing import Any


class CatalogError(Exception):
    """Base class for all catalog exceptions.

    All catalog errors should inherit from this class to allow
    catching them at the API boundary.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize catalog error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Client Errors
# ============================================================================


class ValidationError(CatalogError):
    """Raised when an entity violates a field constraint."""

    def __init__(self, message: str, errors: list[dict[str, str]] | None = None) -> None:
        """Initialize validation error.

        Args:
            message: Human-readable error message.
            errors: Per-field problems as ``{"field": ..., "message": ...}``.
        """
        super().__init__(message, details={"errors": errors or []})
        self.errors = errors or []


class MissingFieldsError(ValidationError):
    """Raised when mandatory creation fields are absent or blank."""

    def __init__(self, fields: list[str]) -> None:
        """Initialize missing fields error.

        Args:
            fields: Names of the missing fields, in declaration order.
        """
        super().__init__(
            f"Missing required fields: {', '.join(fields)}",
            errors=[{"field": f, "message": "field required"} for f in fields],
        )
        self.fields = fields


class InvalidIdentifierError(CatalogError):
    """Raised when an identifier is not syntactically valid."""

    def __init__(self, identifier: str) -> None:
        """Initialize invalid identifier error.

        Args:
            identifier: The rejected identifier.
        """
        super().__init__("invalid id", details={"id": identifier})
        self.identifier = identifier


class NotFoundError(CatalogError):
    """Raised when no entity matches a lookup key."""

    def __init__(self, entity_type: str, key: str, value: str) -> None:
        """Initialize not found error.

        Args:
            entity_type: Type of entity (e.g., "Product", "Category").
            key: Lookup field (e.g., "id", "name").
            value: Lookup value.
        """
        super().__init__(
            "not found",
            details={"entity_type": entity_type, "key": key, "value": value},
        )
        self.entity_type = entity_type


class MissingSearchTermError(CatalogError):
    """Raised when a search is requested without a term."""

    def __init__(self) -> None:
        super().__init__("search term 'q' is required")


# ============================================================================
# Server Errors
# ============================================================================


class UploadFailureError(CatalogError):
    """Raised when the object store rejects or fails an upload."""

    def __init__(self, filename: str, reason: str, status_code: int | None = None) -> None:
        """Initialize upload failure error.

        Args:
            filename: Name of the attachment that failed.
            reason: Description of the failure.
            status_code: HTTP status returned by the object store, if any.
        """
        super().__init__(
            f"Upload of '{filename}' failed: {reason}",
            details={"filename": filename, "status_code": status_code},
        )
        self.filename = filename
        self.status_code = status_code


class StoreFailureError(CatalogError):
    """Raised when the document store fails an operation."""

    def __init__(self, operation: str, reason: str) -> None:
        """Initialize store failure error.

        Args:
            operation: Repository operation that failed.
            reason: Underlying driver error.
        """
        super().__init__(
            f"Store operation '{operation}' failed",
            details={"operation": operation, "reason": reason},
        )
        self.operation = operation
