"""
Product schemas for validation and serialization.
"""

from decimal import Decimal
from pydantic import Field, field_validator
from typing import Any, Optional

from models.base import BaseSchema, TimestampMixin

DEFAULT_UNIT = "UN"


class ProductCreate(BaseSchema):
    """
    Create a new product.

    Required: code, name, category, price
    """

    code: str = Field(
        ...,
        min_length=1,
        max_length=60,
        description="Product code, natural key for imports",
        examples=["EX001"]
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Product name",
        examples=["Cimento CP-II 50kg"]
    )
    category: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Category name"
    )
    price: Decimal = Field(
        ...,
        ge=0,
        description="Base price (other states)"
    )
    price_regional: Optional[Decimal] = Field(
        None,
        ge=0,
        description="Price for PR/SC/RS/EJ/MG"
    )
    stock: int = Field(
        default=0,
        ge=0,
        description="Units in stock"
    )
    unit: str = Field(
        default=DEFAULT_UNIT,
        min_length=1,
        max_length=10,
        description="Unit of measure (UN, KG, CX, ...)"
    )
    sales_multiple: int = Field(
        default=1,
        ge=1,
        description="Product is sold in multiples of this quantity"
    )
    image: Optional[str] = Field(
        None,
        description="Image as a data URL"
    )


class ProductUpdate(BaseSchema):
    """
    Update existing product.

    All fields optional - only provided fields are updated.
    """

    code: Optional[str] = Field(None, min_length=1, max_length=60)
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    price: Optional[Decimal] = Field(None, ge=0)
    price_regional: Optional[Decimal] = Field(None, ge=0)
    stock: Optional[int] = Field(None, ge=0)
    unit: Optional[str] = Field(None, min_length=1, max_length=10)
    sales_multiple: Optional[int] = Field(None, ge=1)
    image: Optional[str] = None


class ProductResponse(BaseSchema, TimestampMixin):
    """
    Product response with all fields.

    Rows written by older clients may lack unit, multiple or stock;
    those come back with the catalog defaults.
    """

    id: str = Field(..., description="Product UUID")
    code: str = Field(..., description="Product code")
    name: str = Field(..., description="Product name")
    category: str = Field(..., description="Category name")
    price: Decimal = Field(..., description="Base price")
    price_regional: Optional[Decimal] = Field(None, description="Regional price")
    stock: int = Field(0, description="Units in stock")
    unit: str = Field(DEFAULT_UNIT, description="Unit of measure")
    sales_multiple: int = Field(1, description="Sales multiple")
    image: Optional[str] = Field(None, description="Image as a data URL")

    @field_validator("stock", mode="before")
    @classmethod
    def stock_default(cls, v: Any) -> Any:
        return 0 if v is None else v

    @field_validator("unit", mode="before")
    @classmethod
    def unit_default(cls, v: Any) -> Any:
        return v or DEFAULT_UNIT

    @field_validator("sales_multiple", mode="before")
    @classmethod
    def multiple_default(cls, v: Any) -> Any:
        return v or 1


class ProductListResponse(BaseSchema):
    """List of products with pagination."""

    data: list[ProductResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
