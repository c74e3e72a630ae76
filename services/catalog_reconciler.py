"""
Catalog reconciler: merge spreadsheet rows into the product catalog.

`reconcile()` is pure: it receives the current catalog snapshot and
returns the writes and new categories to apply. Persisting them is the
job of CatalogImportService.

Column rules:
    - base price: "Preço Demais Estados" when filled, else "Preço de Tabela"
    - regional price: "Preço PR/SC/RS/EJ/MG" when filled and parseable
    - unit: "Unidade de Medida", else the default unit ("UN")
    - sales multiple: leading integer of "Multiplo de Venda", else 1
    - stock: always 0 (imports never carry stock)
"""

import math
import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Iterable, Mapping, Optional, Sequence
import structlog

from models.catalog_import import ImportColumn, MergePolicy
from models.product import DEFAULT_UNIT, ProductResponse

logger = structlog.get_logger(__name__)

ImportRow = Mapping[str, Any]

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


class WriteKind(str, Enum):
    """Kind of store operation a reconciled row turns into."""
    INSERT = "insert"
    UPDATE = "update"


@dataclass(frozen=True)
class ProductDraft:
    """Product fields derived from one valid import row."""
    code: str
    name: str
    category: str
    price: Decimal
    price_regional: Optional[Decimal] = None
    stock: int = 0
    unit: str = DEFAULT_UNIT
    sales_multiple: int = 1

    def to_record(self) -> dict:
        """Row dict in the products table layout."""
        return {
            "code": self.code,
            "name": self.name,
            "category": self.category,
            "price": float(self.price),
            "price_regional": float(self.price_regional) if self.price_regional is not None else None,
            "stock": self.stock,
            "unit": self.unit,
            "sales_multiple": self.sales_multiple,
        }


@dataclass(frozen=True)
class ProductWrite:
    """
    One product write.

    Inserts carry no id and no image. Updates carry the id and image of
    the matched catalog product; every other field comes from the row.
    """
    kind: WriteKind
    product: ProductDraft
    id: Optional[str] = None
    image: Optional[str] = None

    @property
    def is_update(self) -> bool:
        return self.kind == WriteKind.UPDATE

    def to_record(self) -> dict:
        record = self.product.to_record()
        if self.is_update:
            record["image"] = self.image
        return record


@dataclass(frozen=True)
class ReconcileResult:
    """Delta to apply to the store."""
    writes: tuple[ProductWrite, ...] = field(default_factory=tuple)
    categories_to_create: tuple[str, ...] = field(default_factory=tuple)
    submitted_count: int = 0

    @property
    def valid_count(self) -> int:
        return len(self.writes)

    @property
    def skipped_count(self) -> int:
        return self.submitted_count - self.valid_count

    @property
    def is_empty(self) -> bool:
        """No rows were submitted at all."""
        return self.submitted_count == 0

    @property
    def has_valid_rows(self) -> bool:
        return self.valid_count > 0

    @property
    def inserts(self) -> list[ProductWrite]:
        return [w for w in self.writes if not w.is_update]

    @property
    def updates(self) -> list[ProductWrite]:
        return [w for w in self.writes if w.is_update]


def reconcile(
    rows: Sequence[ImportRow],
    existing_catalog: Sequence[ProductResponse],
    existing_categories: Iterable[str],
    policy: MergePolicy,
    default_unit: str = DEFAULT_UNIT,
) -> ReconcileResult:
    """
    Compute the catalog changes for an import.

    Args:
        rows: Raw spreadsheet rows keyed by header label
        existing_catalog: Current products (snapshot, not modified)
        existing_categories: Current category names
        policy: UPDATE_AND_APPEND matches rows to products by code;
            REPLACE_ALL turns every row into an insert (the caller
            deletes the old catalog first)
        default_unit: Unit used when the row has none

    Returns:
        ReconcileResult. Invalid rows are skipped silently and only show
        up in skipped_count.
    """
    known_categories = set(existing_categories)
    new_categories: list[str] = []

    by_code: dict[str, ProductResponse] = {}
    if policy == MergePolicy.UPDATE_AND_APPEND:
        for product in existing_catalog:
            # First occurrence wins when codes repeat
            by_code.setdefault(product.code, product)

    writes = []
    for row in rows:
        draft = draft_from_row(row, default_unit)
        if draft is None:
            continue

        if draft.category not in known_categories:
            known_categories.add(draft.category)
            new_categories.append(draft.category)

        match = by_code.get(draft.code)
        if match is not None:
            writes.append(ProductWrite(
                kind=WriteKind.UPDATE,
                product=draft,
                id=match.id,
                image=match.image,
            ))
        else:
            writes.append(ProductWrite(kind=WriteKind.INSERT, product=draft))

    result = ReconcileResult(
        writes=tuple(writes),
        categories_to_create=tuple(new_categories),
        submitted_count=len(rows),
    )

    logger.debug(
        "catalog_reconciled",
        policy=policy.value,
        submitted=result.submitted_count,
        valid=result.valid_count,
        updates=len(result.updates),
        new_categories=len(new_categories),
    )

    return result


def draft_from_row(row: ImportRow, default_unit: str = DEFAULT_UNIT) -> Optional[ProductDraft]:
    """
    Validate one row and derive its product fields.

    Returns None when code, name, category or list price is missing,
    or when the base price is not a finite non-negative number.
    """
    code = _text(row.get(ImportColumn.CODE))
    name = _text(row.get(ImportColumn.NAME))
    category = _text(row.get(ImportColumn.CATEGORY))
    list_price = row.get(ImportColumn.LIST_PRICE)

    if not code or not name or not category or _is_blank(list_price):
        return None

    other_states_price = row.get(ImportColumn.OTHER_STATES_PRICE)
    raw_price = list_price if _is_blank(other_states_price) else other_states_price
    price = parse_decimal(raw_price)
    if price is None or price < 0:
        return None

    price_regional = parse_decimal(row.get(ImportColumn.REGIONAL_PRICE))
    if price_regional is not None and price_regional < 0:
        price_regional = None

    return ProductDraft(
        code=code,
        name=name,
        category=category,
        price=price,
        price_regional=price_regional,
        stock=0,
        unit=_text(row.get(ImportColumn.UNIT)) or default_unit,
        sales_multiple=parse_sales_multiple(row.get(ImportColumn.SALES_MULTIPLE)),
    )


# ===================
# CELL PARSING
# ===================

def parse_decimal(value: Any) -> Optional[Decimal]:
    """
    Parse a price cell.

    Accepts numbers and text such as "32.50", "32,50", "1.234,56" or
    "R$ 35,00". Returns None for blanks, garbage, NaN and infinities.
    """
    if _is_blank(value) or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        return Decimal(str(value))

    text = str(value).replace("R$", "").replace(" ", "").strip()
    if "," in text:
        # Brazilian format: dot groups thousands, comma marks decimals
        text = text.replace(".", "").replace(",", ".")

    try:
        number = Decimal(text)
    except InvalidOperation:
        return None

    if not number.is_finite():
        return None
    return number


def parse_sales_multiple(value: Any) -> int:
    """Leading integer of the cell; anything unusable or below 1 gives 1."""
    if _is_blank(value) or isinstance(value, bool):
        return 1

    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return 1
        multiple = int(value)
    else:
        match = _LEADING_INT.match(str(value))
        if not match:
            return 1
        multiple = int(match.group(1))

    return multiple if multiple > 0 else 1


def _text(value: Any) -> Optional[str]:
    """Trimmed cell text, or None when blank. 1001.0 reads as "1001"."""
    if _is_blank(value):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False
