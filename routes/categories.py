"""
Category API routes.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
import structlog

from models.category import CategoryCreate, CategoryListResponse
from services.category_service import get_category_service
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


@router.get("", response_model=CategoryListResponse)
async def list_categories():
    """List category names, sorted."""
    try:
        names = get_category_service().list_categories()
        return CategoryListResponse(data=names, total=len(names))

    except Exception as e:
        return handle_error(e)


@router.post("", status_code=201)
async def create_category(data: CategoryCreate):
    """
    Create a category.

    Raises:
        409: Category already exists
    """
    try:
        name = get_category_service().create(data.name)
        return {"name": name}

    except Exception as e:
        return handle_error(e)
