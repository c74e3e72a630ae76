"""
Export service: Generate downloadable files.

Builds the product import template workbook and the order CSV.
"""

import csv
from io import BytesIO, StringIO
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
import structlog

from models.catalog_import import ImportColumn
from models.order import OrderResponse

logger = structlog.get_logger(__name__)

TEMPLATE_SHEET = "Modelo Importação"
TEMPLATE_FILENAME = "Modelo_Produtos_ObraOne.xlsx"

# Example rows shown in the import template
TEMPLATE_EXAMPLES = [
    ["EX001", "Cimento CP-II 50kg", 32.50, "Construção", "SC", 1, 35.00, 32.50],
    ["EX002", "Tinta Acrílica Branca 18L", 250.00, "Pintura", "GL", 1, 260.00, 250.00],
]

ORDER_CSV_HEADERS = ["Código", "Produto", "Quantidade", "Preço Unit.", "Total"]


def order_csv_filename(order_id: Optional[str]) -> str:
    return f"pedido_{order_id or 'novo'}.csv"


class ExportService:
    """Service for generating export files."""

    def generate_product_template(self) -> BytesIO:
        """
        Generate the product import template.

        One header row with every import column followed by two
        example products.

        Returns:
            BytesIO containing the Excel file
        """
        logger.info("generating_product_template")

        wb = Workbook()
        ws = wb.active
        ws.title = TEMPLATE_SHEET

        bold_font = Font(bold=True)

        for col, header in enumerate(ImportColumn.ALL, start=1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.font = bold_font
            ws.column_dimensions[get_column_letter(col)].width = len(header) + 5

        for example in TEMPLATE_EXAMPLES:
            ws.append(example)

        output = BytesIO()
        wb.save(output)
        output.seek(0)
        return output

    def generate_order_csv(self, order: OrderResponse) -> str:
        """
        Generate the semicolon separated CSV for an order.

        One row per item, an empty row, then the order total.
        """
        logger.info("generating_order_csv", order_id=order.id, items=len(order.items))

        output = StringIO()
        writer = csv.writer(output, delimiter=";", lineterminator="\n")

        writer.writerow(ORDER_CSV_HEADERS)
        for item in order.items:
            writer.writerow([
                item.product_id,
                item.product_name,
                item.quantity,
                f"{item.unit_price:.2f}",
                f"{item.total:.2f}",
            ])

        writer.writerow([])
        writer.writerow(["", "", "", "TOTAL PEDIDO:", f"{order.total:.2f}"])

        return output.getvalue()


# Singleton instance for convenience
_export_service: Optional[ExportService] = None

def get_export_service() -> ExportService:
    """Get or create ExportService instance."""
    global _export_service
    if _export_service is None:
        _export_service = ExportService()
    return _export_service
