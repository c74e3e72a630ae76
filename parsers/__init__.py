"""
Spreadsheet parsers module.
"""

from parsers.product_sheet_parser import (
    parse_product_sheet,
    ProductSheet,
)

__all__ = [
    "parse_product_sheet",
    "ProductSheet",
]
