"""
Sales settings schemas.

A single row holds the commercial policy, the freight options offered
on orders and the minimum order value.
"""

from decimal import Decimal
from pydantic import Field, field_validator
from typing import Any, Optional

from models.base import BaseSchema


class SalesSettingsUpdate(BaseSchema):
    """Replace the sales settings."""

    commercial_policy: str = Field(default="", max_length=5000)
    freight_options: list[str] = Field(default_factory=list)
    min_order_value: Decimal = Field(default=Decimal("0"), ge=0)

    @field_validator("freight_options")
    @classmethod
    def unique_options(cls, v: list[str]) -> list[str]:
        """Drop blanks and duplicates, keeping first occurrence."""
        seen: list[str] = []
        for option in v:
            option = option.strip()
            if option and option not in seen:
                seen.append(option)
        return seen


class SalesSettingsResponse(BaseSchema):
    """Current sales settings (defaults when none saved yet)."""

    id: Optional[str] = None
    commercial_policy: str = ""
    freight_options: list[str] = Field(default_factory=list)
    min_order_value: Decimal = Decimal("0")

    @field_validator("commercial_policy", mode="before")
    @classmethod
    def policy_default(cls, v: Any) -> Any:
        return v or ""

    @field_validator("freight_options", mode="before")
    @classmethod
    def options_default(cls, v: Any) -> Any:
        return v or []

    @field_validator("min_order_value", mode="before")
    @classmethod
    def min_default(cls, v: Any) -> Any:
        return 0 if v is None else v
