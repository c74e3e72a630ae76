"""
Product API routes.

Catalog CRUD plus spreadsheet import and the import template download.
"""

from io import BytesIO
from fastapi import APIRouter, Query, UploadFile, File, Form
from fastapi.responses import JSONResponse, Response, StreamingResponse
from typing import Optional
import structlog

from models.base import total_pages
from models.catalog_import import ImportSummary, MergePolicy
from models.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductListResponse,
)
from services.product_service import get_product_service
from services.catalog_import_service import get_catalog_import_service
from services.export_service import get_export_service, TEMPLATE_FILENAME
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


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

@router.get("", response_model=ProductListResponse)
async def list_products(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(20, ge=1, le=100, description="Items per page"),
    search: Optional[str] = Query(None, description="Search name or category"),
    code: Optional[str] = Query(None, description="Search product code"),
):
    """
    List products with optional filters.

    Returns paginated list of products ordered by code.
    """
    try:
        service = get_product_service()

        products, total = service.get_all(
            page=page,
            page_size=page_size,
            search=search,
            code=code,
        )

        return ProductListResponse(
            data=products,
            total=total,
            page=page,
            page_size=page_size,
            total_pages=total_pages(total, page_size)
        )

    except Exception as e:
        return handle_error(e)


@router.post("/import", response_model=ImportSummary)
async def import_products(
    file: UploadFile = File(..., description="Product spreadsheet (.xlsx)"),
    policy: MergePolicy = Form(MergePolicy.UPDATE_AND_APPEND, description="Merge policy"),
):
    """
    Import products from a spreadsheet.

    update-and-append updates products whose code already exists and
    inserts the rest. replace-all deletes the whole catalog first.

    Raises:
        422: Unreadable file, empty sheet or no valid rows
        500: Replace-all failed while deleting the catalog
    """
    logger.info(
        "product_import_upload",
        filename=file.filename,
        content_type=file.content_type,
        policy=policy.value
    )

    try:
        content = await file.read()
        service = get_catalog_import_service()
        return service.import_file(BytesIO(content), policy)

    except Exception as e:
        return handle_error(e)


@router.get("/import/template")
async def download_import_template():
    """Download the spreadsheet template for product imports."""
    try:
        output = get_export_service().generate_product_template()
        return StreamingResponse(
            output,
            media_type=XLSX_MEDIA_TYPE,
            headers={"Content-Disposition": f'attachment; filename="{TEMPLATE_FILENAME}"'}
        )

    except Exception as e:
        return handle_error(e)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str):
    """
    Get a single product by ID.

    Raises:
        404: Product not found
    """
    try:
        service = get_product_service()
        return service.get_by_id(product_id)

    except Exception as e:
        return handle_error(e)


@router.post("", response_model=ProductResponse, status_code=201)
async def create_product(data: ProductCreate):
    """
    Create a new product.

    Raises:
        422: Validation error
    """
    try:
        service = get_product_service()
        return service.create(data)

    except Exception as e:
        return handle_error(e)


@router.patch("/{product_id}", response_model=ProductResponse)
async def update_product(product_id: str, data: ProductUpdate):
    """
    Update an existing product.

    Only provided fields are updated.

    Raises:
        404: Product not found
        422: Validation error
    """
    try:
        service = get_product_service()
        return service.update(product_id, data)

    except Exception as e:
        return handle_error(e)


@router.delete("/{product_id}", status_code=204, response_class=Response)
async def delete_product(product_id: str):
    """
    Delete a product.

    Raises:
        404: Product not found
    """
    try:
        service = get_product_service()
        service.delete(product_id)
        return Response(status_code=204)

    except Exception as e:
        return handle_error(e)
