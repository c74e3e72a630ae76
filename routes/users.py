"""
User administration routes.

There is no login flow; the caller identifies itself with the
X-User-Id header, which is only used to stop self-deletion.
"""

from fastapi import APIRouter, Header
from fastapi.responses import JSONResponse, Response
from typing import Optional
import structlog

from models.user import (
    UserCreate,
    UserUpdate,
    UserResponse,
    UserListResponse,
)
from services.user_service import get_user_service
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


@router.get("", response_model=UserListResponse)
async def list_users():
    """List users by name."""
    try:
        users = get_user_service().get_all()
        return UserListResponse(data=users, total=len(users))

    except Exception as e:
        return handle_error(e)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str):
    try:
        return get_user_service().get_by_id(user_id)

    except Exception as e:
        return handle_error(e)


@router.post("", response_model=UserResponse, status_code=201)
async def create_user(data: UserCreate):
    """
    Create a user.

    Raises:
        409: Username already exists
        422: Password missing
    """
    try:
        return get_user_service().create(data)

    except Exception as e:
        return handle_error(e)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(user_id: str, data: UserUpdate):
    """
    Update a user. Leave password empty to keep the current one.

    Raises:
        404: User not found
        409: Username already exists
    """
    try:
        return get_user_service().update(user_id, data)

    except Exception as e:
        return handle_error(e)


@router.delete("/{user_id}", status_code=204, response_class=Response)
async def delete_user(
    user_id: str,
    acting_user_id: Optional[str] = Header(None, alias="X-User-Id"),
):
    """
    Delete a user.

    Raises:
        404: User not found
        422: A user cannot delete themselves
    """
    try:
        get_user_service().delete(user_id, acting_user_id=acting_user_id)
        return Response(status_code=204)

    except Exception as e:
        return handle_error(e)
