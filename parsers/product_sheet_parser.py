"""
Parser for product catalog spreadsheets.

Reads the first sheet of an .xlsx upload into one dict per data row,
keyed by the header labels exactly as written. No validation happens
here: the catalog reconciler decides which rows are usable.
"""

from dataclasses import dataclass, field
from io import BytesIO
from pathlib import Path
from typing import Any, Optional, Union
import structlog

import pandas as pd

from exceptions import ExcelParseError
from models.catalog_import import ImportColumn

logger = structlog.get_logger(__name__)


@dataclass
class ProductSheet:
    """Rows read from a catalog spreadsheet."""
    sheet_name: str
    columns: list[str] = field(default_factory=list)
    rows: list[dict[str, Any]] = field(default_factory=list)

    @property
    def missing_columns(self) -> list[str]:
        """Required header labels absent from the sheet."""
        return [c for c in ImportColumn.REQUIRED if c not in self.columns]

    @property
    def is_empty(self) -> bool:
        return len(self.rows) == 0


def parse_product_sheet(
    file: Union[str, Path, BytesIO],
    max_rows: Optional[int] = None,
) -> ProductSheet:
    """
    Parse a product spreadsheet.

    Args:
        file: File path (str/Path) or file-like object (BytesIO)
        max_rows: Reject files with more data rows than this

    Returns:
        ProductSheet with header labels and raw row dicts. Blank cells
        are None; fully blank rows are dropped.

    Raises:
        ExcelParseError: If the file is not a readable spreadsheet or
            exceeds max_rows
    """
    logger.info("parsing_product_sheet", file_type=type(file).__name__)

    try:
        excel = pd.ExcelFile(file, engine="openpyxl")
        sheet_name = excel.sheet_names[0]
        df = excel.parse(sheet_name, dtype=object)
    except Exception as e:
        logger.error("product_sheet_read_failed", error=str(e))
        raise ExcelParseError(
            message="Failed to read spreadsheet. Make sure it is a valid Excel file (.xlsx).",
            details={"original_error": str(e)}
        )

    columns = [str(col) for col in df.columns]
    df.columns = columns

    rows = []
    for _, series in df.iterrows():
        row = {label: _clean_cell(value) for label, value in series.items()}
        if all(value is None for value in row.values()):
            continue
        rows.append(row)

    if max_rows is not None and len(rows) > max_rows:
        raise ExcelParseError(
            message=f"Spreadsheet has {len(rows)} rows; the limit is {max_rows}",
            details={"rows": len(rows), "max_rows": max_rows}
        )

    sheet = ProductSheet(sheet_name=sheet_name, columns=columns, rows=rows)

    logger.info(
        "product_sheet_parsed",
        sheet=sheet_name,
        row_count=len(rows),
        missing_columns=sheet.missing_columns,
    )

    return sheet


def _clean_cell(value: Any) -> Any:
    """Map pandas blanks (NaN, NaT) to None."""
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        # Non-scalar cell
        return value
    return value
