"""
Dashboard service.

Headline metrics and the daily sales series, computed from the
orders table. Cancelled orders never count as sales.
"""

from collections import defaultdict
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional
import structlog

from config import get_supabase_client
from models.dashboard import DailySales, DashboardMetrics
from models.order import OrderResponse, OrderStatus
from exceptions import DatabaseError
from services.client_service import get_client_service

logger = structlog.get_logger(__name__)


def percent(part: int, whole: int) -> int:
    """Integer percentage, halves rounded up; 0 when whole is 0."""
    if not whole:
        return 0
    value = Decimal(part * 100) / Decimal(whole)
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class DashboardService:
    """Sales indicators for the dashboard."""

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "orders"

    def get_orders(self) -> list[OrderResponse]:
        """Every order, newest first."""
        try:
            result = self.db.table(self.table).select("*").execute()
        except Exception as e:
            logger.error("dashboard_orders_failed", error=str(e))
            raise DatabaseError("select", str(e))

        orders = [OrderResponse(**row) for row in result.data]
        orders.sort(key=lambda o: o.date, reverse=True)
        return orders

    def get_metrics(self, orders: Optional[list[OrderResponse]] = None) -> DashboardMetrics:
        """
        Compute headline metrics.

        Args:
            orders: Orders to summarize (loaded when not given)
        """
        if orders is None:
            orders = self.get_orders()

        total_sales = sum(
            (o.total for o in orders if o.status != OrderStatus.CANCELLED),
            Decimal("0")
        )
        order_count = len(orders)
        active_clients = len({o.client_id for o in orders})
        total_clients = get_client_service().count()

        average_ticket = total_sales / order_count if order_count else Decimal("0")
        ratio = percent(active_clients, total_clients)

        logger.info(
            "dashboard_metrics_computed",
            orders=order_count,
            active_clients=active_clients,
            total_clients=total_clients
        )

        return DashboardMetrics(
            total_sales=total_sales,
            order_count=order_count,
            active_clients=active_clients,
            average_ticket=average_ticket,
            total_clients=total_clients,
            active_client_ratio=ratio,
        )

    def get_sales_by_date(self) -> list[DailySales]:
        """Non-cancelled sales per calendar day, oldest first."""
        by_day: dict = defaultdict(Decimal)
        for order in self.get_orders():
            if order.status == OrderStatus.CANCELLED:
                continue
            by_day[order.date.date()] += order.total

        return [
            DailySales(date=day.strftime("%d/%m"), amount=amount)
            for day, amount in sorted(by_day.items())
        ]


# Singleton instance for convenience
_dashboard_service: Optional[DashboardService] = None

def get_dashboard_service() -> DashboardService:
    """Get or create DashboardService instance."""
    global _dashboard_service
    if _dashboard_service is None:
        _dashboard_service = DashboardService()
    return _dashboard_service
