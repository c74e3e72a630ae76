"""
Catalog import schemas.

Column labels are matched exactly against the spreadsheet header row.
"""

from enum import Enum
from pydantic import Field

from models.base import BaseSchema


class MergePolicy(str, Enum):
    """How an import treats the products already in the catalog."""
    UPDATE_AND_APPEND = "update-and-append"
    REPLACE_ALL = "replace-all"


class ImportColumn:
    """Spreadsheet header labels."""
    CODE = "Código do Produto"
    NAME = "Nome do Produto"
    LIST_PRICE = "Preço de Tabela"
    CATEGORY = "Categoria"
    UNIT = "Unidade de Medida"
    SALES_MULTIPLE = "Multiplo de Venda"
    REGIONAL_PRICE = "Preço PR/SC/RS/EJ/MG"
    OTHER_STATES_PRICE = "Preço Demais Estados"

    REQUIRED = (CODE, NAME, LIST_PRICE, CATEGORY)
    ALL = (
        CODE,
        NAME,
        LIST_PRICE,
        CATEGORY,
        UNIT,
        SALES_MULTIPLE,
        REGIONAL_PRICE,
        OTHER_STATES_PRICE,
    )


class ImportSummary(BaseSchema):
    """Outcome of one catalog import, returned to the uploader."""

    policy: MergePolicy
    submitted: int = Field(..., ge=0, description="Data rows found in the file")
    valid: int = Field(..., ge=0, description="Rows that passed validation")
    skipped: int = Field(..., ge=0, description="Rows dropped by validation")
    inserted: int = Field(0, ge=0, description="New products written")
    updated: int = Field(0, ge=0, description="Existing products updated in place")
    deleted: int = Field(0, ge=0, description="Products removed before a replace-all")
    failed: int = Field(0, ge=0, description="Product writes rejected by the store")
    categories_created: list[str] = Field(default_factory=list)
    message: str
