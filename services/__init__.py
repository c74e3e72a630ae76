"""
Business logic services.

Each service handles one domain area.
"""

from services.product_service import ProductService, get_product_service
from services.category_service import CategoryService, get_category_service
from services.catalog_import_service import CatalogImportService, get_catalog_import_service
from services.client_service import ClientService, get_client_service
from services.order_service import OrderService, get_order_service
from services.user_service import UserService, get_user_service
from services.sales_settings_service import SalesSettingsService, get_sales_settings_service
from services.dashboard_service import DashboardService, get_dashboard_service
from services.insights_service import InsightsService, get_insights_service
from services.export_service import ExportService, get_export_service

__all__ = [
    "ProductService",
    "get_product_service",
    "CategoryService",
    "get_category_service",
    "CatalogImportService",
    "get_catalog_import_service",
    "ClientService",
    "get_client_service",
    "OrderService",
    "get_order_service",
    "UserService",
    "get_user_service",
    "SalesSettingsService",
    "get_sales_settings_service",
    "DashboardService",
    "get_dashboard_service",
    "InsightsService",
    "get_insights_service",
    "ExportService",
    "get_export_service",
]
