"""
Dashboard schemas.
"""

from decimal import Decimal
from pydantic import Field

from models.base import BaseSchema


class DashboardMetrics(BaseSchema):
    """Headline sales indicators."""

    total_sales: Decimal = Field(..., description="Sum of non-cancelled order totals")
    order_count: int = Field(..., description="All orders, any status")
    active_clients: int = Field(..., description="Distinct clients with at least one order")
    average_ticket: Decimal = Field(..., description="total_sales / order_count")
    total_clients: int = Field(..., description="Registered clients")
    active_client_ratio: int = Field(..., description="active_clients / total_clients, in percent")


class DailySales(BaseSchema):
    """Sales for one calendar day."""

    date: str = Field(..., description="Day label (dd/mm)")
    amount: Decimal


class SalesByDateResponse(BaseSchema):
    """Daily sales, oldest day first."""

    data: list[DailySales]


class InsightsResponse(BaseSchema):
    """Narrative analysis of the metrics."""

    available: bool = Field(..., description="False when no AI key is configured")
    text: str
    metrics: DashboardMetrics
