"""API middleware for the catalog API.

Provides:
- Request ID correlation
- Request body size limit
- CORS rejection logging
- Error handling
"""

import time
from typing import Callable
from uuid import uuid4

import structlog
from fastapi import FastAPI, HTTPException, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from noctura_catalog.infrastructure.config import settings

logger = structlog.get_logger()


# ============================================================================
# Request ID Middleware
# ============================================================================


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Middleware to add request ID for correlation.

    Generates or extracts a request ID and adds it to:
    - Request state for access in handlers
    - Response headers for client correlation
    - Log context for tracing
    """

    HEADER_NAME = "X-Request-ID"

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Process request with correlation ID.

        Args:
            request: Incoming request.
            call_next: Next middleware/handler.

        Returns:
            Response with request ID header.
        """
        request_id = request.headers.get(self.HEADER_NAME) or str(uuid4())
        request.state.request_id = request_id

        structlog.contextvars.bind_contextvars(request_id=request_id)

        start_time = time.perf_counter()
        response = None

        try:
            response = await call_next(request)
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000

            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=getattr(response, "status_code", 500),
                duration_ms=round(duration_ms, 2),
            )

            structlog.contextvars.unbind_contextvars("request_id")

        response.headers[self.HEADER_NAME] = request_id

        return response


# ============================================================================
# Body Size Middleware
# ============================================================================


class BodySizeLimitMiddleware:
    """Reject request bodies larger than the configured cap.

    A declared ``Content-Length`` is checked before the app runs. Bodies
    without one (chunked transfer) are counted as they stream in, and the
    read that crosses the cap raises a 413.
    """

    def __init__(self, app: ASGIApp, max_bytes: int | None = None) -> None:
        self.app = app
        self._max_bytes = max_bytes

    @property
    def max_bytes(self) -> int:
        """Configured cap, defaulting to ``settings.max_request_body_bytes``."""
        if self._max_bytes is not None:
            return self._max_bytes
        return settings.max_request_body_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope)
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.max_bytes:
            logger.warning(
                "Request body too large",
                path=request.url.path,
                content_length=int(content_length),
                max_bytes=self.max_bytes,
            )
            response = JSONResponse(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                content={
                    "error_code": "PAYLOAD_TOO_LARGE",
                    "message": f"Request body exceeds {self.max_bytes} bytes",
                    "details": [],
                    "request_id": getattr(request.state, "request_id", None),
                },
            )
            await response(scope, receive, send)
            return

        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_bytes:
                    logger.warning(
                        "Request body too large",
                        path=request.url.path,
                        received=received,
                        max_bytes=self.max_bytes,
                    )
                    raise HTTPException(
                        status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                        detail={
                            "error_code": "PAYLOAD_TOO_LARGE",
                            "message": f"Request body exceeds {self.max_bytes} bytes",
                        },
                    )
            return message

        await self.app(scope, limited_receive, send)


# ============================================================================
# CORS Rejection Logging
# ============================================================================


class OriginLoggingMiddleware(BaseHTTPMiddleware):
    """Log requests from origins outside the CORS allow-list.

    CORSMiddleware only withholds the CORS headers; this makes the
    rejection visible in the logs.
    """

    def __init__(self, app, allowed_origins: list[str] | None = None) -> None:
        super().__init__(app)
        self.allowed_origins = set(
            allowed_origins if allowed_origins is not None else settings.cors_origins
        )

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        origin = request.headers.get("origin")
        if origin and "*" not in self.allowed_origins and origin not in self.allowed_origins:
            logger.warning("Blocked by CORS", origin=origin, path=request.url.path)
        return await call_next(request)


# ============================================================================
# Error Handling Middleware
# ============================================================================


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Middleware for consistent error handling.

    Catches unhandled exceptions and returns standardized error responses.
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Handle errors uniformly.

        Args:
            request: Incoming request.
            call_next: Next middleware/handler.

        Returns:
            Response or error response.
        """
        try:
            return await call_next(request)
        except Exception as e:
            request_id = getattr(request.state, "request_id", None)

            logger.exception(
                "Unhandled exception",
                path=request.url.path,
                method=request.method,
                error=str(e),
            )

            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error_code": "INTERNAL_ERROR",
                    "message": "An internal error occurred",
                    "details": [],
                    "request_id": request_id,
                },
            )


# ============================================================================
# Middleware Setup
# ============================================================================


def setup_middleware(app: FastAPI) -> None:
    """Configure all middleware for the application.

    Middleware is added in reverse order (last added = first executed).

    Args:
        app: FastAPI application instance.
    """
    # Error handling (innermost - wraps the routers)
    app.add_middleware(ErrorHandlerMiddleware)

    # Body size limit
    app.add_middleware(BodySizeLimitMiddleware)

    # Request ID correlation
    app.add_middleware(RequestIdMiddleware)

    # CORS allow-list (outermost, with rejection logging around it)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(OriginLoggingMiddleware)
