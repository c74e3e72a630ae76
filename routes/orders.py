"""
Order API routes.

Quotations and sales orders, their line items and the CSV export.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse, Response
from typing import Optional
import structlog

from models.order import (
    AddOrderItem,
    OrderCreate,
    OrderUpdate,
    OrderResponse,
    OrderListResponse,
    OrderStatus,
)
from services.order_service import get_order_service
from services.export_service import get_export_service, order_csv_filename
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter()


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


# ===================
# ROUTES
# ===================

@router.get("", response_model=OrderListResponse)
async def list_orders(
    status: Optional[OrderStatus] = Query(None, description="Filter by status"),
    search: Optional[str] = Query(None, description="Search client name or order id"),
):
    """List orders, newest first."""
    try:
        orders = get_order_service().get_all(status=status, search=search)
        return OrderListResponse(data=orders, total=len(orders))

    except Exception as e:
        return handle_error(e)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str):
    """
    Get a single order by ID.

    Raises:
        404: Order not found
    """
    try:
        return get_order_service().get_by_id(order_id)

    except Exception as e:
        return handle_error(e)


@router.post("", response_model=OrderResponse, status_code=201)
async def create_order(data: OrderCreate):
    """
    Create an order or quotation.

    Raises:
        404: Client or product not found
        422: No items
    """
    try:
        return get_order_service().create(data)

    except Exception as e:
        return handle_error(e)


@router.patch("/{order_id}", response_model=OrderResponse)
async def update_order(order_id: str, data: OrderUpdate):
    """
    Update an order. Replacing items recomputes the totals.

    Raises:
        404: Order, client or product not found
        422: Empty item list
    """
    try:
        return get_order_service().update(order_id, data)

    except Exception as e:
        return handle_error(e)


@router.post("/{order_id}/items", response_model=OrderResponse)
async def add_order_item(order_id: str, data: AddOrderItem):
    """
    Add a catalog product to an order at its base price.

    Raises:
        404: Order or product not found
    """
    try:
        return get_order_service().add_item(order_id, data)

    except Exception as e:
        return handle_error(e)


@router.delete("/{order_id}/items/{index}", response_model=OrderResponse)
async def remove_order_item(order_id: str, index: int):
    """
    Remove the line item at position `index` (0-based).

    Raises:
        404: Order or item not found
        422: It is the last item
    """
    try:
        return get_order_service().remove_item(order_id, index)

    except Exception as e:
        return handle_error(e)


@router.get("/{order_id}/export")
async def export_order(order_id: str):
    """
    Download the order as a semicolon separated CSV.

    Raises:
        404: Order not found
    """
    try:
        order = get_order_service().get_by_id(order_id)
        content = get_export_service().generate_order_csv(order)
        return Response(
            content=content,
            media_type="text/csv; charset=utf-8",
            headers={
                "Content-Disposition": f'attachment; filename="{order_csv_filename(order.id)}"'
            }
        )

    except Exception as e:
        return handle_error(e)


@router.delete("/{order_id}", status_code=204, response_class=Response)
async def delete_order(order_id: str):
    """
    Delete an order.

    Raises:
        404: Order not found
    """
    try:
        get_order_service().delete(order_id)
        return Response(status_code=204)

    except Exception as e:
        return handle_error(e)
