"""
Catalog import service: apply an uploaded spreadsheet to the catalog.

Flow:
    1. parse the spreadsheet into raw rows
    2. load the catalog snapshot (products + categories)
    3. reconcile rows against the snapshot (pure, see catalog_reconciler)
    4. create missing categories
    5. replace-all only: delete every existing product
    6. write products (insert / update)

Replace-all is NOT atomic. Deletion and insertion are separate phases
against the store. A failure during deletion aborts the import before
anything is inserted, leaving the catalog partially deleted. Failures
while writing products are logged and counted but do not stop the
remaining writes. Nothing is retried.

When the product store offers batch operations (insert_products,
delete_products) each phase is a single request; otherwise the store
is called once per product.
"""

from io import BytesIO
from pathlib import Path
from typing import Optional, Protocol, Sequence, Union, runtime_checkable
import structlog

from config import settings
from exceptions import (
    CatalogImportError,
    EmptySpreadsheetError,
    NoValidProductsError,
)
from models.catalog_import import ImportSummary, MergePolicy
from models.product import ProductResponse
from parsers.product_sheet_parser import parse_product_sheet
from services.catalog_reconciler import (
    ImportRow,
    ProductWrite,
    ReconcileResult,
    reconcile,
)
from services.category_service import get_category_service
from services.product_service import get_product_service

logger = structlog.get_logger(__name__)


# ===================
# STORE INTERFACES
# ===================

class ProductStore(Protocol):
    """Product persistence used by imports."""

    def list_products(self) -> list[ProductResponse]:
        ...

    def insert_product(self, record: dict) -> ProductResponse:
        ...

    def update_product(self, product_id: str, record: dict) -> ProductResponse:
        ...

    def delete_product(self, product_id: str) -> None:
        ...


@runtime_checkable
class BatchProductStore(Protocol):
    """Optional bulk operations of a product store."""

    def insert_products(self, records: list[dict]) -> int:
        ...

    def delete_products(self, product_ids: list[str]) -> int:
        ...


class CategoryStore(Protocol):
    """Category persistence used by imports."""

    def list_categories(self) -> list[str]:
        ...

    def insert_category(self, name: str) -> str:
        ...


# ===================
# SERVICE
# ===================

class CatalogImportService:
    """Runs spreadsheet imports against the catalog store."""

    def __init__(
        self,
        products: Optional[ProductStore] = None,
        categories: Optional[CategoryStore] = None,
        default_unit: Optional[str] = None,
    ):
        self.products = products or get_product_service()
        self.categories = categories or get_category_service()
        self.default_unit = default_unit or settings.default_unit

    def import_file(
        self,
        file: Union[str, Path, BytesIO],
        policy: MergePolicy,
    ) -> ImportSummary:
        """
        Parse and import a spreadsheet.

        Raises:
            ExcelParseError: File is not a readable spreadsheet
            EmptySpreadsheetError: File has no data rows
            NoValidProductsError: No row passed validation
            CatalogImportError: Replace-all failed while deleting
        """
        sheet = parse_product_sheet(file, max_rows=settings.import_max_rows)
        if sheet.missing_columns:
            logger.warning(
                "import_missing_columns",
                missing=sheet.missing_columns,
                sheet=sheet.sheet_name
            )
        return self.import_rows(sheet.rows, policy)

    def import_rows(
        self,
        rows: Sequence[ImportRow],
        policy: MergePolicy,
    ) -> ImportSummary:
        """Reconcile already-parsed rows and persist the result."""
        logger.info("catalog_import_started", policy=policy.value, rows=len(rows))

        if not rows:
            raise EmptySpreadsheetError()

        existing = self.products.list_products()
        existing_categories = self.categories.list_categories()

        result = reconcile(
            rows,
            existing,
            existing_categories,
            policy,
            default_unit=self.default_unit,
        )

        if not result.has_valid_rows:
            logger.warning("catalog_import_no_valid_rows", submitted=result.submitted_count)
            raise NoValidProductsError(result.submitted_count)

        categories_created = self._create_categories(result.categories_to_create)

        deleted = 0
        if policy == MergePolicy.REPLACE_ALL:
            deleted = self._delete_catalog(existing, result)

        inserted, updated, failed = self._write_products(result)

        summary = ImportSummary(
            policy=policy,
            submitted=result.submitted_count,
            valid=result.valid_count,
            skipped=result.skipped_count,
            inserted=inserted,
            updated=updated,
            deleted=deleted,
            failed=failed,
            categories_created=categories_created,
            message=_summary_message(inserted, updated, failed, result.skipped_count),
        )

        logger.info(
            "catalog_import_completed",
            policy=policy.value,
            submitted=summary.submitted,
            inserted=inserted,
            updated=updated,
            deleted=deleted,
            failed=failed,
            skipped=summary.skipped,
            categories_created=len(categories_created),
        )

        return summary

    # ===================
    # PHASES
    # ===================

    def _create_categories(self, names: Sequence[str]) -> list[str]:
        """Insert new categories; a failed insert is logged and skipped."""
        created = []
        for name in names:
            try:
                self.categories.insert_category(name)
                created.append(name)
            except Exception as e:
                logger.error("category_insert_failed", name=name, error=str(e))
        return created

    def _delete_catalog(
        self,
        existing: Sequence[ProductResponse],
        result: ReconcileResult,
    ) -> int:
        """Delete every product in the snapshot. Stops at the first failure."""
        ids = [p.id for p in existing]
        logger.info("catalog_delete_started", count=len(ids))

        if isinstance(self.products, BatchProductStore):
            try:
                return self.products.delete_products(ids)
            except Exception as e:
                deleted = getattr(e, "details", {}).get("deleted", 0)
                logger.error("catalog_delete_failed", deleted=deleted, total=len(ids), error=str(e))
                raise CatalogImportError(
                    "Failed while deleting the existing catalog; "
                    "no products were imported",
                    details={"deleted": deleted, "total": len(ids), "valid": result.valid_count},
                )

        deleted = 0
        for product_id in ids:
            try:
                self.products.delete_product(product_id)
            except Exception as e:
                logger.error(
                    "catalog_delete_failed",
                    product_id=product_id,
                    deleted=deleted,
                    total=len(ids),
                    error=str(e)
                )
                raise CatalogImportError(
                    "Failed while deleting the existing catalog; "
                    "it is now partially deleted and no products were imported",
                    details={"deleted": deleted, "total": len(ids), "valid": result.valid_count},
                )
            deleted += 1
        return deleted

    def _write_products(self, result: ReconcileResult) -> tuple[int, int, int]:
        """
        Apply inserts and updates, best effort.

        Returns:
            Tuple of (inserted, updated, failed)
        """
        inserted = updated = failed = 0

        for write in result.updates:
            if self._apply(write):
                updated += 1
            else:
                failed += 1

        inserts = result.inserts
        if inserts and isinstance(self.products, BatchProductStore):
            try:
                inserted = self.products.insert_products([w.to_record() for w in inserts])
            except Exception as e:
                inserted = getattr(e, "details", {}).get("inserted", 0)
                logger.error(
                    "product_batch_insert_failed",
                    inserted=inserted,
                    count=len(inserts),
                    error=str(e)
                )
                failed += len(inserts) - inserted
        else:
            for write in inserts:
                if self._apply(write):
                    inserted += 1
                else:
                    failed += 1

        return inserted, updated, failed

    def _apply(self, write: ProductWrite) -> bool:
        try:
            if write.is_update:
                self.products.update_product(write.id, write.to_record())
            else:
                self.products.insert_product(write.to_record())
            return True
        except Exception as e:
            logger.error(
                "product_write_failed",
                kind=write.kind.value,
                code=write.product.code,
                product_id=write.id,
                error=str(e)
            )
            return False


def _summary_message(inserted: int, updated: int, failed: int, skipped: int) -> str:
    message = f"{inserted + updated} products processed ({inserted} new, {updated} updated)"
    if skipped:
        message += f"; {skipped} invalid rows skipped"
    if failed:
        message += f"; {failed} writes failed"
    return message


# Singleton instance for convenience
_catalog_import_service: Optional[CatalogImportService] = None

def get_catalog_import_service() -> CatalogImportService:
    """Get or create CatalogImportService instance."""
    global _catalog_import_service
    if _catalog_import_service is None:
        _catalog_import_service = CatalogImportService()
    return _catalog_import_service
