"""
Unit tests for ProductService.

Run: pytest tests/unit/test_product_service.py -v
"""

import pytest
from decimal import Decimal
from unittest.mock import patch, MagicMock

from services.product_service import ProductService, BULK_CHUNK_SIZE, SNAPSHOT_PAGE_SIZE
from models.product import ProductCreate, ProductUpdate
from exceptions import DatabaseError, ProductNotFoundError

from tests.factories import ProductFactory


class TestProductServiceGetAll:
    """Tests for ProductService.get_all()"""

    def test_get_all_returns_products(self, mock_db, mock_supabase, sample_products_list):
        """Should return list of products with total count."""
        # Arrange
        mock_supabase.set_table_data("products", sample_products_list, count=3)
        service = ProductService()

        # Act
        products, total = service.get_all()

        # Assert
        assert len(products) == 3
        assert total == 3
        assert products[0].code == "CIM-50"
        assert products[0].price == Decimal("32.5")

    def test_get_all_empty_returns_empty_list(self, mock_db, mock_supabase):
        """Should return empty list when no products exist."""
        mock_supabase.set_table_data("products", [], count=0)
        service = ProductService()

        products, total = service.get_all()

        assert products == []
        assert total == 0

    def test_get_all_with_pagination(self, mock_db, mock_supabase):
        """Should request the right range."""
        # Arrange
        products = ProductFactory.create_batch(5)
        mock_supabase.set_table_data("products", products[:2], count=5)
        service = ProductService()

        # Act
        products, total = service.get_all(page=2, page_size=2)

        # Assert
        assert len(products) == 2
        assert total == 5
        assert mock_supabase.calls_for("products", "range") == [(2, 3)]

    def test_get_all_with_search_and_code(self, mock_db, mock_supabase, sample_products_list):
        """Search goes to name/category, code filter to code."""
        mock_supabase.set_table_data("products", sample_products_list)
        service = ProductService()

        service.get_all(search="tinta", code="TIN")

        assert mock_supabase.calls_for("products", "or_") == [
            ("name.ilike.%tinta%,category.ilike.%tinta%",)
        ]
        assert mock_supabase.calls_for("products", "ilike") == [("code", "%TIN%")]

    def test_missing_defaults_filled(self, mock_db, mock_supabase):
        """Old rows without unit, multiple or stock get defaults."""
        row = ProductFactory.create(id="p1")
        row.update(unit=None, sales_multiple=None, stock=None)
        mock_supabase.set_table_data("products", [row])
        service = ProductService()

        product = service.get_by_id("p1")

        assert product.unit == "UN"
        assert product.sales_multiple == 1
        assert product.stock == 0


class TestProductServiceGetById:
    """Tests for ProductService.get_by_id()"""

    def test_get_by_id_returns_product(self, mock_db, mock_supabase, sample_products_list):
        mock_supabase.set_table_data("products", sample_products_list)
        service = ProductService()

        product = service.get_by_id("prod-2")

        assert product.code == "TIN-18"

    def test_get_by_id_not_found(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("products", [])
        service = ProductService()

        with pytest.raises(ProductNotFoundError) as exc_info:
            service.get_by_id("missing")

        assert exc_info.value.status_code == 404

    def test_get_by_code(self, mock_db, mock_supabase, sample_products_list):
        mock_supabase.set_table_data("products", sample_products_list)
        service = ProductService()

        assert service.get_by_code("ARG-20").id == "prod-3"
        assert service.get_by_code("NOPE") is None


class TestProductServiceWrites:
    """Tests for create, update and delete."""

    def test_create_product(self, mock_db, mock_supabase):
        """Decimals are sent as floats and defaults applied."""
        # Arrange
        service = ProductService()
        data = ProductCreate(code="EX001", name="Cimento", category="Construção", price=Decimal("32.50"))

        # Act
        product = service.create(data)

        # Assert
        assert product.id == "test-uuid-123"
        assert product.unit == "UN"
        assert product.sales_multiple == 1
        sent = mock_supabase.calls_for("products", "insert")[0][0]
        assert sent["price"] == 32.5
        assert isinstance(sent["price"], float)

    def test_create_rejects_negative_price(self):
        with pytest.raises(ValueError):
            ProductCreate(code="X", name="X", category="X", price=Decimal("-1"))

    def test_update_only_sends_given_fields(self, mock_db, mock_supabase, sample_product_data):
        mock_supabase.set_table_data("products", [sample_product_data])
        service = ProductService()

        product = service.update("prod-1", ProductUpdate(stock=50))

        assert product.stock == 50
        assert mock_supabase.calls_for("products", "update") == [({"stock": 50},)]

    def test_update_not_found(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("products", [])
        service = ProductService()

        with pytest.raises(ProductNotFoundError):
            service.update("missing", ProductUpdate(stock=1))

    def test_delete_product(self, mock_db, mock_supabase, sample_product_data):
        mock_supabase.set_table_data("products", [sample_product_data])
        service = ProductService()

        assert service.delete("prod-1") is True
        assert mock_supabase.calls_for("products", "delete") == [()]


class TestProductServiceBulk:
    """Tests for the bulk store operations used by imports."""

    def test_insert_products_single_request(self, mock_db, mock_supabase):
        service = ProductService()
        records = [
            {"code": "A", "name": "A", "category": "C", "price": Decimal("1.5")},
            {"code": "B", "name": "B", "category": "C", "price": Decimal("2")},
        ]

        inserted = service.insert_products(records)

        assert inserted == 2
        calls = mock_supabase.calls_for("products", "insert")
        assert len(calls) == 1
        assert [r["price"] for r in calls[0][0]] == [1.5, 2.0]

    def test_delete_products_by_ids(self, mock_db, mock_supabase):
        service = ProductService()

        deleted = service.delete_products(["a", "b", "c"])

        assert deleted == 3
        assert mock_supabase.calls_for("products", "in_") == [("id", ["a", "b", "c"])]

    def test_delete_products_in_chunks(self, mock_db, mock_supabase):
        """Large id lists are split so each in_() filter stays bounded."""
        service = ProductService()
        ids = [f"id-{i}" for i in range(BULK_CHUNK_SIZE * 2 + 5)]

        deleted = service.delete_products(ids)

        assert deleted == len(ids)
        chunks = [args[1] for args in mock_supabase.calls_for("products", "in_")]
        assert [len(c) for c in chunks] == [BULK_CHUNK_SIZE, BULK_CHUNK_SIZE, 5]
        assert sum(chunks, []) == ids

    def test_insert_products_in_chunks(self, mock_db, mock_supabase):
        service = ProductService()
        records = [
            {"code": f"P{i}", "name": "X", "category": "C", "price": Decimal("1")}
            for i in range(BULK_CHUNK_SIZE + 1)
        ]

        inserted = service.insert_products(records)

        assert inserted == BULK_CHUNK_SIZE + 1
        calls = mock_supabase.calls_for("products", "insert")
        assert [len(c[0]) for c in calls] == [BULK_CHUNK_SIZE, 1]

    def test_delete_failure_reports_deleted_so_far(self):
        # Arrange
        db = MagicMock()
        delete_query = db.table.return_value.delete.return_value.in_.return_value
        delete_query.execute.side_effect = [MagicMock(), RuntimeError("URI too long")]
        ids = [f"id-{i}" for i in range(BULK_CHUNK_SIZE * 3)]

        with patch("services.product_service.get_supabase_client", return_value=db):
            service = ProductService()

        # Act / Assert
        with pytest.raises(DatabaseError) as exc_info:
            service.delete_products(ids)

        assert exc_info.value.details["deleted"] == BULK_CHUNK_SIZE
        assert exc_info.value.details["total"] == len(ids)


class TestProductServiceSnapshot:
    """Tests for list_products(), the catalog snapshot used by imports."""

    def _paged_db(self, pages):
        db = MagicMock()
        query = db.table.return_value.select.return_value.order.return_value
        query.range.return_value.execute.side_effect = [
            MagicMock(data=page) for page in pages
        ]
        return db, query

    def test_reads_every_page(self):
        """A catalog past the server row cap is read in full."""
        # Arrange
        rows = [ProductFactory.create(id=f"p{i:05d}") for i in range(SNAPSHOT_PAGE_SIZE + 500)]
        db, query = self._paged_db([rows[:SNAPSHOT_PAGE_SIZE], rows[SNAPSHOT_PAGE_SIZE:]])

        with patch("services.product_service.get_supabase_client", return_value=db):
            service = ProductService()

        # Act
        products = service.list_products()

        # Assert
        assert len(products) == SNAPSHOT_PAGE_SIZE + 500
        assert products[-1].id == rows[-1]["id"]
        assert [c.args for c in query.range.call_args_list] == [
            (0, SNAPSHOT_PAGE_SIZE - 1),
            (SNAPSHOT_PAGE_SIZE, SNAPSHOT_PAGE_SIZE * 2 - 1),
        ]

    def test_exact_page_multiple_reads_one_empty_page(self):
        rows = [ProductFactory.create(id=f"p{i:05d}") for i in range(SNAPSHOT_PAGE_SIZE)]
        db, query = self._paged_db([rows, []])

        with patch("services.product_service.get_supabase_client", return_value=db):
            products = ProductService().list_products()

        assert len(products) == SNAPSHOT_PAGE_SIZE
        assert query.range.call_count == 2

    def test_small_catalog_single_request(self, mock_db, mock_supabase, sample_products_list):
        mock_supabase.set_table_data("products", sample_products_list)

        products = ProductService().list_products()

        assert [p.code for p in products] == ["CIM-50", "TIN-18", "ARG-20"]
        assert mock_supabase.calls_for("products", "range") == [(0, SNAPSHOT_PAGE_SIZE - 1)]

    def test_bulk_with_nothing_to_do(self, mock_db, mock_supabase):
        service = ProductService()

        assert service.insert_products([]) == 0
        assert service.delete_products([]) == 0
        assert mock_supabase.calls == []
