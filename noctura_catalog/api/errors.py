"""Exception handlers for the catalog API.

Maps the catalog error taxonomy and request validation failures to the
standard error envelope.
"""

from typing import Any

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

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

logger = structlog.get_logger()

# Most specific class first; the first isinstance match wins.
ERROR_MAP: list[tuple[type[CatalogError], int, str]] = [
    (MissingFieldsError, status.HTTP_400_BAD_REQUEST, "MISSING_FIELDS"),
    (ValidationError, status.HTTP_400_BAD_REQUEST, "VALIDATION_ERROR"),
    (InvalidIdentifierError, status.HTTP_400_BAD_REQUEST, "INVALID_ID"),
    (MissingSearchTermError, status.HTTP_400_BAD_REQUEST, "MISSING_SEARCH_TERM"),
    (NotFoundError, status.HTTP_404_NOT_FOUND, "NOT_FOUND"),
    (UploadFailureError, status.HTTP_500_INTERNAL_SERVER_ERROR, "UPLOAD_FAILED"),
    (StoreFailureError, status.HTTP_500_INTERNAL_SERVER_ERROR, "STORE_FAILURE"),
]


def resolve_error(exc: CatalogError) -> tuple[int, str]:
    """Return the HTTP status and error code for a catalog error."""
    for error_type, status_code, error_code in ERROR_MAP:
        if isinstance(exc, error_type):
            return status_code, error_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR"


def error_body(
    error_code: str,
    message: str,
    details: list[dict[str, Any]] | None = None,
    request_id: str | None = None,
) -> dict[str, Any]:
    """Build the standard error envelope."""
    return {
        "error_code": error_code,
        "message": message,
        "details": details or [],
        "request_id": request_id,
    }


async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    """Handle catalog errors with consistent format."""
    request_id = getattr(request.state, "request_id", None)
    status_code, error_code = resolve_error(exc)

    if status_code >= 500:
        logger.error(
            "Catalog operation failed",
            path=request.url.path,
            method=request.method,
            error_code=error_code,
            error=exc.message,
            details=exc.details,
        )
        # Server-side details stay in the logs.
        details: list[dict[str, Any]] = []
    else:
        details = list(exc.details.get("errors", []))

    return JSONResponse(
        status_code=status_code,
        content=error_body(error_code, exc.message, details, request_id),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request validation errors as client errors."""
    request_id = getattr(request.state, "request_id", None)
    details = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ())),
            "message": err.get("msg", "invalid value"),
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("VALIDATION_ERROR", "Invalid request", details, request_id),
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions with consistent format."""
    request_id = getattr(request.state, "request_id", None)

    detail = exc.detail
    if isinstance(detail, dict):
        error_code = detail.get("error_code", "ERROR")
        message = detail.get("message", str(detail))
        details = detail.get("details", [])
    else:
        error_code = "ERROR"
        message = str(detail)
        details = []

    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(error_code, message, details, request_id),
        headers=getattr(exc, "headers", None),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions with consistent format."""
    request_id = getattr(request.state, "request_id", None)

    logger.exception(
        "Unhandled exception in handler",
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("INTERNAL_ERROR", "An internal error occurred", None, request_id),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the application."""
    app.add_exception_handler(CatalogError, catalog_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(HTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, generic_exception_handler)
