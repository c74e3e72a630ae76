"""
Client API routes.
"""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse, Response
from typing import Optional
import structlog

from models.base import total_pages
from models.client import (
    ClientCreate,
    ClientUpdate,
    ClientResponse,
    ClientListResponse,
)
from services.client_service import get_client_service
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

@router.get("", response_model=ClientListResponse)
async def list_clients(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(20, ge=1, le=100, description="Items per page"),
    search: Optional[str] = Query(None, description="Search name, business name or document"),
    segment: Optional[str] = Query(None, description="Filter by segment"),
):
    """List clients ordered by name."""
    try:
        service = get_client_service()

        clients, total = service.get_all(
            page=page,
            page_size=page_size,
            search=search,
            segment=segment,
        )

        return ClientListResponse(
            data=clients,
            total=total,
            page=page,
            page_size=page_size,
            total_pages=total_pages(total, page_size)
        )

    except Exception as e:
        return handle_error(e)


@router.get("/segments")
async def list_segments():
    """Distinct client segments, for filters."""
    try:
        segments = get_client_service().get_segments()
        return {"data": segments, "total": len(segments)}

    except Exception as e:
        return handle_error(e)


@router.get("/{client_id}", response_model=ClientResponse)
async def get_client(client_id: str):
    """
    Get a single client by ID.

    Raises:
        404: Client not found
    """
    try:
        return get_client_service().get_by_id(client_id)

    except Exception as e:
        return handle_error(e)


@router.post("", response_model=ClientResponse, status_code=201)
async def create_client(data: ClientCreate):
    """
    Create a new client.

    Raises:
        422: Validation error or incomplete contact
    """
    try:
        return get_client_service().create(data)

    except Exception as e:
        return handle_error(e)


@router.patch("/{client_id}", response_model=ClientResponse)
async def update_client(client_id: str, data: ClientUpdate):
    """
    Update an existing client.

    Raises:
        404: Client not found
        422: Validation error or incomplete contact
    """
    try:
        return get_client_service().update(client_id, data)

    except Exception as e:
        return handle_error(e)


@router.delete("/{client_id}", status_code=204, response_class=Response)
async def delete_client(client_id: str):
    """
    Delete a client.

    Raises:
        404: Client not found
    """
    try:
        get_client_service().delete(client_id)
        return Response(status_code=204)

    except Exception as e:
        return handle_error(e)
