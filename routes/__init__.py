"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.products import router as products_router
from routes.categories import router as categories_router
from routes.clients import router as clients_router
from routes.orders import router as orders_router
from routes.users import router as users_router
from routes.sales_settings import router as sales_settings_router
from routes.dashboard import router as dashboard_router

__all__ = [
    "products_router",
    "categories_router",
    "clients_router",
    "orders_router",
    "users_router",
    "sales_settings_router",
    "dashboard_router",
]
