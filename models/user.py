"""
User schemas for validation and serialization.

Passwords are accepted on input only; responses never carry them.
"""

from enum import Enum
from pydantic import Field
from typing import Optional

from models.base import BaseSchema


class UserRole(str, Enum):
    """Access level."""
    ADMIN = "ADMIN"
    SALES = "SALES"


class UserCreate(BaseSchema):
    """Create a new user."""

    name: str = Field(..., min_length=1, max_length=120)
    username: str = Field(..., min_length=1, max_length=60)
    role: UserRole = Field(default=UserRole.SALES)
    password: Optional[str] = Field(
        None,
        max_length=128,
        description="Required for new users"
    )


class UserUpdate(BaseSchema):
    """
    Update existing user.

    Leave password empty to keep the current one.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=120)
    username: Optional[str] = Field(None, min_length=1, max_length=60)
    role: Optional[UserRole] = None
    password: Optional[str] = Field(None, max_length=128)


class UserResponse(BaseSchema):
    """User without credentials."""

    id: str
    name: str
    username: str
    role: UserRole


class UserListResponse(BaseSchema):
    """List of users."""

    data: list[UserResponse]
    total: int
