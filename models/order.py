"""
Order / quotation schemas.

A draft order is a quotation (Orçamento); confirming it turns it
into a sales order (Pedido).
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from pydantic import Field, field_validator
from typing import Any, Optional

from models.base import BaseSchema, TimestampMixin


class OrderStatus(str, Enum):
    """Order lifecycle status, stored with its display label."""
    DRAFT = "Orçamento"
    CONFIRMED = "Pedido"
    SHIPPED = "Enviado"
    CANCELLED = "Cancelado"


class OrderItemCreate(BaseSchema):
    """
    Line item as submitted.

    unit_price and product_name fall back to the catalog product.
    """

    product_id: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)
    unit_price: Optional[Decimal] = Field(None, ge=0)
    product_name: Optional[str] = Field(None, max_length=255)


class OrderItem(BaseSchema):
    """Line item as stored, with its computed total."""

    product_id: str
    product_name: str
    quantity: int = Field(..., gt=0)
    unit_price: Decimal = Field(..., ge=0)
    total: Decimal


class OrderCreate(BaseSchema):
    """Create a new order or quotation."""

    client_id: str = Field(..., min_length=1)
    seller_id: Optional[str] = None
    date: Optional[datetime] = Field(None, description="Defaults to now")
    status: OrderStatus = Field(default=OrderStatus.DRAFT)
    freight_type: Optional[str] = Field(None, max_length=80)
    notes: Optional[str] = Field(None, max_length=2000)
    items: list[OrderItemCreate] = Field(default_factory=list)


class OrderUpdate(BaseSchema):
    """
    Update existing order.

    Replacing items recomputes every total.
    """

    client_id: Optional[str] = Field(None, min_length=1)
    seller_id: Optional[str] = None
    status: Optional[OrderStatus] = None
    freight_type: Optional[str] = Field(None, max_length=80)
    notes: Optional[str] = Field(None, max_length=2000)
    items: Optional[list[OrderItemCreate]] = None

    @field_validator("status", mode="before")
    @classmethod
    def status_not_null(cls, v: Any) -> Any:
        # Omit status to keep it; the column is not nullable
        if v is None:
            raise ValueError("status cannot be null")
        return v


class AddOrderItem(BaseSchema):
    """Append one catalog product to an order."""

    product_id: str = Field(..., min_length=1)
    quantity: int = Field(default=1, gt=0)


class OrderResponse(BaseSchema, TimestampMixin):
    """Order with items and totals."""

    id: str
    client_id: str
    client_name: str = ""
    seller_id: Optional[str] = None
    date: datetime
    items: list[OrderItem] = Field(default_factory=list)
    total: Decimal = Decimal("0")
    status: OrderStatus = OrderStatus.DRAFT
    freight_type: Optional[str] = None
    notes: Optional[str] = None
    below_min_order_value: bool = Field(
        default=False,
        description="Total is under the configured minimum order value"
    )

    @field_validator("items", mode="before")
    @classmethod
    def items_default(cls, v: Any) -> Any:
        return v or []


class OrderListResponse(BaseSchema):
    """List of orders, newest first."""

    data: list[OrderResponse]
    total: int
