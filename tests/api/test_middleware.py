"""Tests for API middleware."""

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from noctura_catalog.api.errors import register_exception_handlers
from noctura_catalog.api.middleware import (
    BodySizeLimitMiddleware,
    ErrorHandlerMiddleware,
    RequestIdMiddleware,
)


@pytest.fixture
def small_app() -> FastAPI:
    """App with a tiny body cap and a failing route."""
    app = FastAPI()

    @app.post("/echo")
    async def echo(request: Request) -> dict:
        return {"size": len(await request.body())}

    @app.get("/boom")
    async def boom() -> dict:
        raise RuntimeError("boom")

    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=16)
    app.add_middleware(RequestIdMiddleware)
    register_exception_handlers(app)
    return app


class TestRequestIdMiddleware:
    """Tests for request ID correlation middleware."""

    def test_generates_request_id_if_not_provided(self, client: TestClient) -> None:
        """Should generate request ID if not in request headers."""
        response = client.get("/health")
        assert response.status_code == 200
        # UUID format
        assert len(response.headers["X-Request-ID"]) == 36

    def test_request_id_in_error_body(self, client: TestClient) -> None:
        """Error envelopes should carry the request ID."""
        response = client.get(
            "/products/not-an-id",
            headers={"X-Request-ID": "req-42"},
        )
        assert response.status_code == 400
        assert response.json()["request_id"] == "req-42"


class TestBodySizeLimitMiddleware:
    """Tests for the request body cap."""

    def test_small_body_passes(self, small_app: FastAPI) -> None:
        """Bodies under the cap reach the handler."""
        response = TestClient(small_app).post("/echo", content=b"x" * 16)
        assert response.status_code == 200
        assert response.json() == {"size": 16}

    def test_large_body_rejected(self, small_app: FastAPI) -> None:
        """Bodies over the cap are rejected with 413."""
        response = TestClient(small_app).post(
            "/echo",
            content=b"x" * 17,
            headers={"X-Request-ID": "req-big"},
        )
        assert response.status_code == 413
        data = response.json()
        assert data["error_code"] == "PAYLOAD_TOO_LARGE"
        assert data["request_id"] == "req-big"

    def test_chunked_body_under_cap_passes(self, small_app: FastAPI) -> None:
        """Streamed bodies within the cap reach the handler."""
        response = TestClient(small_app).post("/echo", content=iter([b"x" * 8, b"y" * 8]))
        assert response.status_code == 200
        assert response.json() == {"size": 16}

    def test_chunked_body_over_cap_rejected(self, small_app: FastAPI) -> None:
        """Streamed bodies without Content-Length are counted and capped."""
        response = TestClient(small_app).post(
            "/echo",
            content=iter([b"x" * 10, b"y" * 10]),
            headers={"X-Request-ID": "req-chunked"},
        )
        assert "content-length" not in response.request.headers
        assert response.status_code == 413
        data = response.json()
        assert data["error_code"] == "PAYLOAD_TOO_LARGE"
        assert data["request_id"] == "req-chunked"


class TestErrorHandlerMiddleware:
    """Tests for unhandled exception handling."""

    def test_unhandled_exception_becomes_500(self, small_app: FastAPI) -> None:
        """Unexpected errors should produce the standard envelope."""
        response = TestClient(small_app).get("/boom")
        assert response.status_code == 500
        data = response.json()
        assert data["error_code"] == "INTERNAL_ERROR"
        assert data["details"] == []


class TestCorsMiddleware:
    """Tests for the CORS allow-list."""

    def test_allowed_origin_preflight(self, client: TestClient) -> None:
        """Allowed origins get CORS headers."""
        response = client.options(
            "/products",
            headers={
                "Origin": "http://localhost:4200",
                "Access-Control-Request-Method": "GET",
            },
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "http://localhost:4200"

    def test_disallowed_origin_gets_no_cors_headers(self, client: TestClient) -> None:
        """Other origins are served without CORS headers."""
        response = client.get("/health", headers={"Origin": "https://evil.example.com"})
        assert response.status_code == 200
        assert "access-control-allow-origin" not in response.headers

    def test_disallowed_origin_preflight_rejected(self, client: TestClient) -> None:
        """Preflights from other origins are refused."""
        response = client.options(
            "/products",
            headers={
                "Origin": "https://evil.example.com",
                "Access-Control-Request-Method": "GET",
            },
        )
        assert response.status_code == 400
