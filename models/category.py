"""
Category schemas.
"""

from pydantic import Field

from models.base import BaseSchema


class CategoryCreate(BaseSchema):
    """Create a new category."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Category name",
        examples=["Construção"]
    )


class CategoryListResponse(BaseSchema):
    """All category names, sorted."""

    data: list[str]
    total: int
