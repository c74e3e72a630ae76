"""
Sales settings routes.

Commercial policy text, freight options and minimum order value.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
import structlog

from models.sales_settings import SalesSettingsUpdate, SalesSettingsResponse
from services.sales_settings_service import get_sales_settings_service
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter()


def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
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


@router.get("", response_model=SalesSettingsResponse)
async def get_sales_settings():
    """Current settings (defaults until first saved)."""
    try:
        return get_sales_settings_service().get()

    except Exception as e:
        return handle_error(e)


@router.put("", response_model=SalesSettingsResponse)
async def save_sales_settings(data: SalesSettingsUpdate):
    """Replace the sales settings."""
    try:
        return get_sales_settings_service().save(data)

    except Exception as e:
        return handle_error(e)
