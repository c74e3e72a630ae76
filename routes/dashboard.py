"""
Dashboard API routes.

Sales metrics, the daily sales series and AI insights.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
import structlog

from models.dashboard import (
    DashboardMetrics,
    SalesByDateResponse,
    InsightsResponse,
)
from services.dashboard_service import get_dashboard_service
from services.insights_service import get_insights_service
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

@router.get("/metrics", response_model=DashboardMetrics)
async def get_metrics():
    """
    Headline sales indicators.

    Cancelled orders are excluded from sales but still count as orders.
    """
    try:
        return get_dashboard_service().get_metrics()

    except Exception as e:
        return handle_error(e)


@router.get("/sales-by-date", response_model=SalesByDateResponse)
async def get_sales_by_date():
    """Non-cancelled sales per day, oldest first."""
    try:
        return SalesByDateResponse(data=get_dashboard_service().get_sales_by_date())

    except Exception as e:
        return handle_error(e)


@router.post("/insights", response_model=InsightsResponse)
async def generate_insights():
    """
    Executive summary of the current figures, written by Claude.

    Raises:
        503: Claude API unavailable
    """
    try:
        return get_insights_service().generate()

    except Exception as e:
        return handle_error(e)
