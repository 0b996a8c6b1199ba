"""Tests for category API endpoints."""

from datetime import datetime, timedelta, timezone

from fastapi import status

from noctura_catalog.catalog.models import Category


class TestListCategories:
    """Tests for GET /categorias."""

    def test_empty(self, client):
        """Test listing with no categories."""
        response = client.get("/categorias")

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"categories": []}

    def test_oldest_first(self, client, seed):
        """Test categories are listed in creation order."""
        base = datetime(2026, 1, 1, tzinfo=timezone.utc)
        seed(
            Category(name="mesas", created_at=base + timedelta(minutes=2), updated_at=base),
            Category(name="sillas", created_at=base, updated_at=base),
        )

        data = client.get("/categorias").json()

        assert [c["name"] for c in data["categories"]] == ["sillas", "mesas"]


class TestCreateCategory:
    """Tests for POST /categorias."""

    def test_create(self, client):
        """Test category creation."""
        response = client.post("/categorias", json={"name": "  lamparas "})

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["name"] == "lamparas"
        assert "id" in data
        assert "createdAt" in data
        assert "created_at" not in data

        names = [c["name"] for c in client.get("/categorias").json()["categories"]]
        assert names == ["lamparas"]

    def test_blank_name(self, client):
        """Test a blank name is rejected."""
        response = client.post("/categorias", json={"name": "   "})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_missing_name(self, client):
        """Test a body without a name is rejected."""
        response = client.post("/categorias", json={})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error_code"] == "VALIDATION_ERROR"


class TestDeleteCategory:
    """Tests for DELETE /categorias/nombre/{name}."""

    def test_delete(self, client):
        """Test deletion by name."""
        client.post("/categorias", json={"name": "sofas"})

        response = client.delete("/categorias/nombre/sofas")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["message"] == "Category deleted"
        assert data["deleted"]["name"] == "sofas"
        assert client.get("/categorias").json()["categories"] == []

    def test_delete_unknown(self, client):
        """Test deleting a missing category is a 404."""
        response = client.delete("/categorias/nombre/nada")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error_code"] == "NOT_FOUND"

    def test_delete_keeps_products(self, client, seed, make_product):
        """Test products referencing a deleted category are untouched."""
        seed(make_product(0, category="sofas"))
        client.post("/categorias", json={"name": "sofas"})

        client.delete("/categorias/nombre/sofas")

        assert client.get("/products/categoria/sofas").json()["total"] == 1
