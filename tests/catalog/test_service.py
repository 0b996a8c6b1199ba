"""Tests for the catalog service and pagination helpers."""

from unittest.mock import AsyncMock

import pytest

from noctura_catalog.catalog.service import (
    CatalogService,
    PaginatedResult,
    PaginationParams,
    parse_positive_int,
    project_detail,
    project_summary,
)
from noctura_catalog.domain.exceptions import MissingSearchTermError, NotFoundError


class TestParsePositiveInt:
    """Tests for query value parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("3", 3),
            (" 7 ", 7),
            (4, 4),
            ("0", 6),
            ("-1", 6),
            ("abc", 6),
            ("2.5", 6),
            ("", 6),
            (None, 6),
            (True, 6),
            (str(2**63 - 1), 2**63 - 1),
            (str(2**63), 6),
            (str(10**20), 6),
        ],
    )
    def test_parse(self, value, expected):
        assert parse_positive_int(value, 6) == expected


class TestPaginationParams:
    """Tests for PaginationParams."""

    def test_defaults(self):
        params = PaginationParams.parse()
        assert params.page == 1
        assert params.limit == 6
        assert params.offset == 0

    def test_offset(self):
        assert PaginationParams.parse("3", "10").offset == 20


class TestPaginatedResult:
    """Tests for the listing envelope."""

    @pytest.mark.parametrize(
        "total,limit,pages",
        [(0, 6, 0), (1, 6, 1), (6, 6, 1), (7, 6, 2), (13, 6, 3), (10, 1, 10)],
    )
    def test_total_pages(self, total, limit, pages):
        result = PaginatedResult(items=[], total=total, page=1, limit=limit)
        assert result.total_pages == pages

    def test_envelope(self):
        result = PaginatedResult(items=[{"id": "x"}], total=7, page=2, limit=6)
        assert result.to_envelope() == {
            "products": [{"id": "x"}],
            "total": 7,
            "page": 2,
            "limit": 6,
            "totalPages": 2,
        }


class TestProjections:
    """Tests for list and detail projections."""

    def test_summary(self, make_product):
        summary = project_summary(make_product(2))

        assert summary == {
            "id": summary["id"],
            "name": "Producto 2",
            "price": 102.0,
            "description": "Descripcion 2",
            "image": "https://cdn.example.com/2-a.jpg",
        }

    def test_summary_without_images(self, make_product):
        assert project_summary(make_product(0, images=[]))["image"] is None

    def test_detail_has_every_field(self, make_product):
        detail = project_detail(make_product(1))

        assert detail["colors"] == ["negro", "blanco"]
        assert len(detail["images"]) == 2
        assert detail["thickness"] == "3 cm"
        assert detail["category"] == "sillas"


class TestCatalogService:
    """Tests for CatalogService."""

    @pytest.mark.asyncio
    async def test_list_products(self, session, make_product):
        session.add_all([make_product(i) for i in range(7)])
        await session.flush()

        result = await CatalogService(session).list_products(PaginationParams(page=2, limit=6))

        assert result.total == 7
        assert result.total_pages == 2
        assert [p["name"] for p in result.items] == ["Producto 0"]

    @pytest.mark.asyncio
    async def test_list_by_category(self, session, make_product):
        session.add_all(
            [make_product(0, category="Mesas"), make_product(1, category="sillas")]
        )
        await session.flush()

        result = await CatalogService(session).list_by_category("mesas", PaginationParams())

        assert result.total == 1
        assert result.items[0]["name"] == "Producto 0"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("term", [None, "", "  "])
    async def test_search_requires_term(self, session, term):
        with pytest.raises(MissingSearchTermError):
            await CatalogService(session).search(term, PaginationParams())

    @pytest.mark.asyncio
    async def test_search_keeps_inner_spaces(self, session, make_product):
        session.add_all(
            [make_product(0, name="Silla alta"), make_product(1, name="Sillaalta")]
        )
        await session.flush()

        result = await CatalogService(session).search("a a", PaginationParams())

        assert [p["name"] for p in result.items] == ["Silla alta"]

    @pytest.mark.asyncio
    async def test_get_product_by_name_not_found(self, session):
        with pytest.raises(NotFoundError):
            await CatalogService(session).get_product_by_name("Nada")

    @pytest.mark.asyncio
    async def test_page_past_the_end_skips_query(self, session, make_product):
        """Test an offset beyond the total never reaches the database."""
        session.add_all([make_product(i) for i in range(2)])
        await session.flush()
        service = CatalogService(session)
        service.repository.find_all = AsyncMock()
        huge = 2**62

        result = await service.list_products(PaginationParams(page=huge, limit=huge))

        assert result.items == []
        assert result.total == 2
        assert result.page == huge
        service.repository.find_all.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_limit_clamped_to_remaining(self, session, make_product):
        """Test the query limit never exceeds the matching rows left."""
        session.add_all([make_product(i) for i in range(3)])
        await session.flush()

        result = await CatalogService(session).list_products(PaginationParams(page=1, limit=2**62))

        assert [p["name"] for p in result.items] == ["Producto 2", "Producto 1", "Producto 0"]
        assert result.limit == 2**62
