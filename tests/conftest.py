"""
Shared test fixtures.
"""

import os
import sys
from pathlib import Path

# Add project root to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

# Settings require these before any project import
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")

import pytest
from unittest.mock import patch
from contextlib import ExitStack
from datetime import datetime, timezone
from typing import Generator

# Service modules that call get_supabase_client()
SERVICE_MODULES = [
    "services.product_service",
    "services.category_service",
    "services.client_service",
    "services.order_service",
    "services.user_service",
    "services.sales_settings_service",
    "services.dashboard_service",
]


# ===================
# MOCK SUPABASE CLIENT
# ===================

def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data: list = None, count: int = None):
        self.data = data or []
        self.count = count if count is not None else len(self.data)


class MockSupabaseQuery:
    """
    Mock Supabase query builder with chainable methods.

    eq() and in_() filter the configured rows; the other filters only
    get recorded in the client's call log.
    """

    def __init__(self, table: str, data: list, count: int = None, calls: list = None):
        self._table = table
        self._data = data
        self._count = count
        self._calls = calls if calls is not None else []
        self._is_single = False

    def _record(self, method: str, *args):
        self._calls.append((self._table, method, args))

    def select(self, *args, **kwargs):
        self._record("select", *args)
        return self

    def insert(self, data):
        self._record("insert", data)
        # Simulate insert - add id and timestamps
        rows = data if isinstance(data, list) else [data]
        inserted = []
        for item in rows:
            row = dict(item)
            row.setdefault("id", "test-uuid-123")
            row["created_at"] = _now()
            row["updated_at"] = _now()
            inserted.append(row)
        self._data = inserted
        self._count = None
        return self

    def update(self, data):
        self._record("update", data)
        # Simulate update - merge with existing data
        updated_data = []
        for item in self._data:
            merged = {**item, **data}
            merged["updated_at"] = _now()
            updated_data.append(merged)
        self._data = updated_data if updated_data else [data]
        return self

    def delete(self):
        self._record("delete")
        return self

    def eq(self, column, value):
        self._record("eq", column, value)
        self._data = [row for row in self._data if row.get(column) == value]
        self._count = None
        return self

    def in_(self, column, values):
        self._record("in_", column, list(values))
        self._data = [row for row in self._data if row.get(column) in values]
        self._count = None
        return self

    def ilike(self, column, pattern):
        self._record("ilike", column, pattern)
        return self

    def or_(self, filters):
        self._record("or_", filters)
        return self

    def single(self):
        self._is_single = True
        return self

    def order(self, column, **kwargs):
        self._record("order", column)
        return self

    def range(self, start, end):
        self._record("range", start, end)
        return self

    def limit(self, count):
        self._record("limit", count)
        return self

    def execute(self) -> MockSupabaseResponse:
        if self._is_single:
            # Return first item or empty for single()
            data = self._data[0] if self._data else None
            return MockSupabaseResponse(
                data=data,
                count=1 if data else 0
            )
        return MockSupabaseResponse(
            data=self._data,
            count=self._count if self._count is not None else len(self._data)
        )


class MockSupabaseTable:
    """Mock Supabase table with configurable responses."""

    def __init__(self, name: str, data: list = None, count: int = None, calls: list = None):
        self._name = name
        self._data = data or []
        self._count = count
        self._calls = calls

    def _query(self) -> MockSupabaseQuery:
        rows = [dict(row) for row in self._data]
        return MockSupabaseQuery(self._name, rows, self._count, self._calls)

    def select(self, *args, **kwargs):
        return self._query().select(*args, **kwargs)

    def insert(self, data):
        return self._query().insert(data)

    def update(self, data):
        # For update, pass the existing data so it can be merged
        return self._query().update(data)

    def delete(self):
        return self._query().delete()


class MockSupabaseClient:
    """Mock Supabase client."""

    def __init__(self):
        self._tables = {}
        self.calls = []

    def set_table_data(self, table_name: str, data: list, count: int = None):
        """Configure mock data for a table."""
        self._tables[table_name] = {"data": data, "count": count}

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table."""
        config = self._tables.get(name, {"data": [], "count": None})
        return MockSupabaseTable(name, config["data"], config["count"], self.calls)

    def calls_for(self, table_name: str, method: str) -> list:
        """Arguments of every recorded call of `method` on a table."""
        return [args for table, m, args in self.calls if table == table_name and m == method]


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("products", [
                {"id": "1", "code": "P001", ...}
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch the database client with mock.

    Usage:
        def test_something(mock_db, mock_supabase):
            mock_supabase.set_table_data("products", [...])
            # Now any service created here gets the mock
    """
    with ExitStack() as stack:
        stack.enter_context(patch("config.database.get_supabase_client", return_value=mock_supabase))
        for module in SERVICE_MODULES:
            stack.enter_context(patch(f"{module}.get_supabase_client", return_value=mock_supabase))
        yield mock_supabase


@pytest.fixture
def sample_product_data() -> dict:
    """Sample product row for testing."""
    return {
        "id": "prod-1",
        "code": "CIM-50",
        "name": "Cimento CP-II 50kg",
        "category": "Construção",
        "price": 32.5,
        "price_regional": 35.0,
        "stock": 120,
        "unit": "SC",
        "sales_multiple": 1,
        "image": None,
        "created_at": "2025-03-01T10:00:00Z",
        "updated_at": "2025-03-01T10:00:00Z"
    }


@pytest.fixture
def sample_products_list() -> list:
    """Sample list of product rows for testing."""
    return [
        {
            "id": "prod-1",
            "code": "CIM-50",
            "name": "Cimento CP-II 50kg",
            "category": "Construção",
            "price": 32.5,
            "price_regional": 35.0,
            "stock": 120,
            "unit": "SC",
            "sales_multiple": 1,
        },
        {
            "id": "prod-2",
            "code": "TIN-18",
            "name": "Tinta Acrílica Branca 18L",
            "category": "Pintura",
            "price": 250.0,
            "price_regional": 260.0,
            "stock": 8,
            "unit": "GL",
            "sales_multiple": 1,
        },
        {
            "id": "prod-3",
            "code": "ARG-20",
            "name": "Argamassa AC-I 20kg",
            "category": "Construção",
            "price": 18.9,
            "price_regional": None,
            "stock": 0,
            "unit": "SC",
            "sales_multiple": 5,
        }
    ]


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client():
    """
    Create FastAPI test client.

    Usage:
        def test_endpoint(test_client):
            response = test_client.get("/api/products")
            assert response.status_code == 200
    """
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)
