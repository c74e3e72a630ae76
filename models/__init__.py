"""
Pydantic models for validation and serialization.
"""

from models.base import (
    BaseSchema,
    TimestampMixin,
    total_pages,
)
from models.product import (
    DEFAULT_UNIT,
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductListResponse,
)
from models.category import (
    CategoryCreate,
    CategoryListResponse,
)
from models.catalog_import import (
    MergePolicy,
    ImportColumn,
    ImportSummary,
)
from models.client import (
    PersonType,
    ClientContact,
    ClientCreate,
    ClientUpdate,
    ClientResponse,
    ClientListResponse,
)
from models.order import (
    OrderStatus,
    OrderItemCreate,
    OrderItem,
    OrderCreate,
    OrderUpdate,
    AddOrderItem,
    OrderResponse,
    OrderListResponse,
)
from models.user import (
    UserRole,
    UserCreate,
    UserUpdate,
    UserResponse,
    UserListResponse,
)
from models.sales_settings import (
    SalesSettingsUpdate,
    SalesSettingsResponse,
)
from models.dashboard import (
    DashboardMetrics,
    DailySales,
    SalesByDateResponse,
    InsightsResponse,
)

__all__ = [
    # Base
    "BaseSchema",
    "TimestampMixin",
    "total_pages",

    # Product
    "DEFAULT_UNIT",
    "ProductCreate",
    "ProductUpdate",
    "ProductResponse",
    "ProductListResponse",

    # Category
    "CategoryCreate",
    "CategoryListResponse",

    # Catalog import
    "MergePolicy",
    "ImportColumn",
    "ImportSummary",

    # Client
    "PersonType",
    "ClientContact",
    "ClientCreate",
    "ClientUpdate",
    "ClientResponse",
    "ClientListResponse",

    # Order
    "OrderStatus",
    "OrderItemCreate",
    "OrderItem",
    "OrderCreate",
    "OrderUpdate",
    "AddOrderItem",
    "OrderResponse",
    "OrderListResponse",

    # User
    "UserRole",
    "UserCreate",
    "UserUpdate",
    "UserResponse",
    "UserListResponse",

    # Sales settings
    "SalesSettingsUpdate",
    "SalesSettingsResponse",

    # Dashboard
    "DashboardMetrics",
    "DailySales",
    "SalesByDateResponse",
    "InsightsResponse",
]
