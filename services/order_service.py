"""
Order service: quotations and sales orders.

Line totals and the order total are recomputed from the items on
every change; stored totals are never trusted.
"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, Optional
import structlog

from config import get_supabase_client
from models.order import (
    AddOrderItem,
    OrderCreate,
    OrderItem,
    OrderItemCreate,
    OrderResponse,
    OrderStatus,
    OrderUpdate,
)
from exceptions import (
    DatabaseError,
    EmptyOrderError,
    OrderItemNotFoundError,
    OrderNotFoundError,
)
from services.client_service import get_client_service
from services.product_service import get_product_service
from services.sales_settings_service import get_sales_settings_service

logger = structlog.get_logger(__name__)


# ===================
# TOTALS
# ===================

def calculate_item_total(quantity: int, unit_price: Decimal) -> Decimal:
    """quantity x unit_price, no rounding."""
    return Decimal(quantity) * Decimal(unit_price)


def calculate_order_total(items: Iterable[OrderItem]) -> Decimal:
    """Sum of line totals."""
    return sum((item.total for item in items), Decimal("0"))


def build_item(
    product_id: str,
    product_name: str,
    quantity: int,
    unit_price: Decimal,
) -> OrderItem:
    """Line item with its total filled in."""
    return OrderItem(
        product_id=product_id,
        product_name=product_name,
        quantity=quantity,
        unit_price=unit_price,
        total=calculate_item_total(quantity, unit_price),
    )


def _item_to_row(item: OrderItem) -> dict:
    return {
        "product_id": item.product_id,
        "product_name": item.product_name,
        "quantity": item.quantity,
        "unit_price": float(item.unit_price),
        "total": float(item.total),
    }


class OrderService:
    """
    Order business logic.

    Handles CRUD operations for orders and their line items.
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "orders"

    # ===================
    # READ OPERATIONS
    # ===================

    def get_all(
        self,
        status: Optional[OrderStatus] = None,
        search: Optional[str] = None,
    ) -> list[OrderResponse]:
        """
        Get orders, newest first.

        Args:
            status: Only orders with this status
            search: Substring of the client name (case insensitive)
                or of the order id
        """
        logger.info("getting_orders", status=status, search=search)

        try:
            query = self.db.table(self.table).select("*")
            if status:
                query = query.eq("status", status.value)
            result = query.execute()
        except Exception as e:
            logger.error("get_orders_failed", error=str(e))
            raise DatabaseError("select", str(e))

        orders = [OrderResponse(**row) for row in result.data]

        if search:
            needle = search.lower()
            orders = [
                o for o in orders
                if needle in o.client_name.lower() or search in o.id
            ]

        orders.sort(key=lambda o: o.date, reverse=True)

        minimum = self._min_order_value()
        for order in orders:
            order.below_min_order_value = minimum > 0 and order.total < minimum

        logger.info("orders_retrieved", count=len(orders))
        return orders

    def get_by_id(self, order_id: str) -> OrderResponse:
        """
        Get a single order by ID.

        Raises:
            OrderNotFoundError: If order doesn't exist
        """
        logger.debug("getting_order", order_id=order_id)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("id", order_id)
                .execute()
            )

            if not result.data:
                raise OrderNotFoundError(order_id)

            return self._flag_minimum(OrderResponse(**result.data[0]))

        except OrderNotFoundError:
            raise
        except Exception as e:
            logger.error("get_order_failed", order_id=order_id, error=str(e))
            raise DatabaseError("select", str(e))

    # ===================
    # WRITE OPERATIONS
    # ===================

    def create(self, data: OrderCreate) -> OrderResponse:
        """
        Create an order or quotation.

        Raises:
            EmptyOrderError: If no items were given
            ClientNotFoundError: If the client doesn't exist
            ProductNotFoundError: If an item needs catalog data for an
                unknown product
        """
        logger.info("creating_order", client_id=data.client_id, items=len(data.items))

        if not data.items:
            raise EmptyOrderError()

        client = get_client_service().get_by_id(data.client_id)
        items = self._resolve_items(data.items)

        row = {
            "client_id": client.id,
            "client_name": client.name,
            "seller_id": data.seller_id,
            "date": (data.date or datetime.now(timezone.utc)).isoformat(),
            "items": [_item_to_row(i) for i in items],
            "total": float(calculate_order_total(items)),
            "status": data.status.value,
            "freight_type": data.freight_type,
            "notes": data.notes,
        }

        try:
            result = self.db.table(self.table).insert(row).execute()
            order = OrderResponse(**result.data[0])
        except Exception as e:
            logger.error("create_order_failed", client_id=data.client_id, error=str(e))
            raise DatabaseError("insert", str(e))

        logger.info("order_created", order_id=order.id, total=str(order.total))
        return self._flag_minimum(order)

    def update(self, order_id: str, data: OrderUpdate) -> OrderResponse:
        """
        Update an order.

        Only provided fields are updated.

        Raises:
            OrderNotFoundError: If order doesn't exist
            EmptyOrderError: If items is given but empty
            ClientNotFoundError: If the new client doesn't exist
        """
        logger.info("updating_order", order_id=order_id)

        existing = self.get_by_id(order_id)
        update_data = data.model_dump(mode="json", exclude_unset=True, exclude={"items", "client_id"})

        if data.client_id is not None and data.client_id != existing.client_id:
            client = get_client_service().get_by_id(data.client_id)
            update_data["client_id"] = client.id
            update_data["client_name"] = client.name

        if data.items is not None:
            if not data.items:
                raise EmptyOrderError()
            items = self._resolve_items(data.items)
            update_data["items"] = [_item_to_row(i) for i in items]
            update_data["total"] = float(calculate_order_total(items))

        if not update_data:
            return existing

        return self._save(order_id, update_data)

    def add_item(self, order_id: str, data: AddOrderItem) -> OrderResponse:
        """
        Append a catalog product at its base price.

        Raises:
            OrderNotFoundError: If order doesn't exist
            ProductNotFoundError: If product doesn't exist
        """
        order = self.get_by_id(order_id)
        product = get_product_service().get_by_id(data.product_id)

        items = list(order.items)
        items.append(build_item(product.id, product.name, data.quantity, product.price))

        logger.info("adding_order_item", order_id=order_id, product_id=product.id)
        return self._save_items(order_id, items)

    def remove_item(self, order_id: str, index: int) -> OrderResponse:
        """
        Remove the line item at `index`.

        Raises:
            OrderNotFoundError: If order doesn't exist
            OrderItemNotFoundError: If index is out of range
            EmptyOrderError: If it is the only item
        """
        order = self.get_by_id(order_id)

        if index < 0 or index >= len(order.items):
            raise OrderItemNotFoundError(order_id, index)
        if len(order.items) == 1:
            raise EmptyOrderError()

        items = list(order.items)
        removed = items.pop(index)

        logger.info("removing_order_item", order_id=order_id, product_id=removed.product_id)
        return self._save_items(order_id, items)

    def delete(self, order_id: str) -> bool:
        """
        Delete an order.

        Raises:
            OrderNotFoundError: If order doesn't exist
        """
        logger.info("deleting_order", order_id=order_id)

        self.get_by_id(order_id)

        try:
            self.db.table(self.table).delete().eq("id", order_id).execute()
        except Exception as e:
            logger.error("delete_order_failed", order_id=order_id, error=str(e))
            raise DatabaseError("delete", str(e))

        logger.info("order_deleted", order_id=order_id)
        return True

    # ===================
    # HELPERS
    # ===================

    def _resolve_items(self, items: list[OrderItemCreate]) -> list[OrderItem]:
        """Fill missing names and prices from the catalog and compute totals."""
        resolved = []
        for item in items:
            name = item.product_name
            price = item.unit_price
            if name is None or price is None:
                product = get_product_service().get_by_id(item.product_id)
                name = name or product.name
                price = product.price if price is None else price
            resolved.append(build_item(item.product_id, name, item.quantity, price))
        return resolved

    def _save_items(self, order_id: str, items: list[OrderItem]) -> OrderResponse:
        return self._save(order_id, {
            "items": [_item_to_row(i) for i in items],
            "total": float(calculate_order_total(items)),
        })

    def _save(self, order_id: str, update_data: dict) -> OrderResponse:
        try:
            result = (
                self.db.table(self.table)
                .update(update_data)
                .eq("id", order_id)
                .execute()
            )
            order = OrderResponse(**result.data[0])
        except Exception as e:
            logger.error("update_order_failed", order_id=order_id, error=str(e))
            raise DatabaseError("update", str(e))

        logger.info("order_updated", order_id=order_id, fields=list(update_data.keys()))
        return self._flag_minimum(order)

    def _flag_minimum(self, order: OrderResponse) -> OrderResponse:
        """Mark orders below the configured minimum value (warning only)."""
        minimum = self._min_order_value()
        order.below_min_order_value = minimum > 0 and order.total < minimum
        return order

    def _min_order_value(self) -> Decimal:
        return get_sales_settings_service().get().min_order_value


# Singleton instance for convenience
_order_service: Optional[OrderService] = None

def get_order_service() -> OrderService:
    """Get or create OrderService instance."""
    global _order_service
    if _order_service is None:
        _order_service = OrderService()
    return _order_service
