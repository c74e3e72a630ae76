"""
Product service for business logic operations.

Also serves as the product side of the catalog store used by imports
(list_products, insert_product(s), update_product, delete_product(s)).
"""

from typing import Iterator, Optional
import structlog

from config import get_supabase_client
from models.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
)
from exceptions import (
    ProductNotFoundError,
    DatabaseError
)

logger = structlog.get_logger(__name__)

# Decimal fields are sent to Supabase as floats
_DECIMAL_FIELDS = ("price", "price_regional")

# Rows per page when reading the whole catalog (Supabase max-rows default)
SNAPSHOT_PAGE_SIZE = 1000

# Rows or ids per bulk request
BULK_CHUNK_SIZE = 200


def _to_row(data: dict) -> dict:
    row = dict(data)
    for key in _DECIMAL_FIELDS:
        if row.get(key) is not None:
            row[key] = float(row[key])
    return row


def _chunks(items: list, size: int) -> Iterator[list]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


class ProductService:
    """
    Product business logic.

    Handles CRUD operations for products.
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "products"

    # ===================
    # READ OPERATIONS
    # ===================

    def get_all(
        self,
        page: int = 1,
        page_size: int = 20,
        search: Optional[str] = None,
        code: Optional[str] = None,
    ) -> tuple[list[ProductResponse], int]:
        """
        Get products with optional filters.

        Args:
            page: Page number (1-indexed)
            page_size: Items per page
            search: Substring of name or category (case insensitive)
            code: Substring of product code (case insensitive)

        Returns:
            Tuple of (products list, total count)
        """
        logger.info(
            "getting_products",
            page=page,
            page_size=page_size,
            search=search,
            code=code
        )

        try:
            query = self.db.table(self.table).select("*", count="exact")

            if search:
                query = query.or_(f"name.ilike.%{search}%,category.ilike.%{search}%")
            if code:
                query = query.ilike("code", f"%{code}%")

            offset = (page - 1) * page_size
            query = query.range(offset, offset + page_size - 1)
            query = query.order("code")

            result = query.execute()

            products = [ProductResponse(**row) for row in result.data]
            total = result.count or 0

            logger.info(
                "products_retrieved",
                count=len(products),
                total=total
            )

            return products, total

        except Exception as e:
            logger.error(
                "get_products_failed",
                error=str(e)
            )
            raise DatabaseError("select", str(e))

    def get_by_id(self, product_id: str) -> ProductResponse:
        """
        Get a single product by ID.

        Raises:
            ProductNotFoundError: If product doesn't exist
        """
        logger.debug("getting_product", product_id=product_id)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("id", product_id)
                .execute()
            )

            if not result.data:
                raise ProductNotFoundError(product_id)

            return ProductResponse(**result.data[0])

        except ProductNotFoundError:
            raise
        except Exception as e:
            logger.error(
                "get_product_failed",
                product_id=product_id,
                error=str(e)
            )
            raise DatabaseError("select", str(e))

    def get_by_code(self, code: str) -> Optional[ProductResponse]:
        """
        Get the first product with this exact code.

        Returns:
            ProductResponse or None if not found
        """
        logger.debug("getting_product_by_code", code=code)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("code", code)
                .limit(1)
                .execute()
            )

            if not result.data:
                return None

            return ProductResponse(**result.data[0])

        except Exception as e:
            logger.error(
                "get_product_by_code_failed",
                code=code,
                error=str(e)
            )
            raise DatabaseError("select", str(e))

    def list_products(self) -> list[ProductResponse]:
        """
        Full catalog snapshot, read page by page.

        Used by imports to match rows against existing products. Supabase
        caps each response at its max-rows setting, so pages are read
        until a short one comes back.
        """
        products: list[ProductResponse] = []
        offset = 0

        try:
            while True:
                result = (
                    self.db.table(self.table)
                    .select("*")
                    .order("id")
                    .range(offset, offset + SNAPSHOT_PAGE_SIZE - 1)
                    .execute()
                )
                products.extend(ProductResponse(**row) for row in result.data)
                if len(result.data) < SNAPSHOT_PAGE_SIZE:
                    break
                offset += SNAPSHOT_PAGE_SIZE
        except Exception as e:
            logger.error("list_products_failed", loaded=len(products), error=str(e))
            raise DatabaseError("select", str(e))

        logger.debug("catalog_snapshot_loaded", count=len(products))
        return products

    # ===================
    # WRITE OPERATIONS
    # ===================

    def create(self, data: ProductCreate) -> ProductResponse:
        """
        Create a new product.

        Codes are not required to be unique: imports match on the
        first occurrence.
        """
        logger.info("creating_product", code=data.code)
        product = self.insert_product(data.model_dump())
        logger.info(
            "product_created",
            product_id=product.id,
            code=product.code
        )
        return product

    def update(self, product_id: str, data: ProductUpdate) -> ProductResponse:
        """
        Update an existing product.

        Only provided fields are updated.

        Raises:
            ProductNotFoundError: If product doesn't exist
        """
        logger.info("updating_product", product_id=product_id)

        existing = self.get_by_id(product_id)

        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            # Nothing to update, return existing
            return existing

        product = self.update_product(product_id, update_data)

        logger.info(
            "product_updated",
            product_id=product_id,
            fields=list(update_data.keys())
        )

        return product

    def delete(self, product_id: str) -> bool:
        """
        Delete a product.

        Raises:
            ProductNotFoundError: If product doesn't exist
        """
        logger.info("deleting_product", product_id=product_id)

        self.get_by_id(product_id)
        self.delete_product(product_id)

        logger.info("product_deleted", product_id=product_id)
        return True

    # ===================
    # CATALOG STORE
    # ===================

    def insert_product(self, record: dict) -> ProductResponse:
        """Insert one product row."""
        try:
            result = (
                self.db.table(self.table)
                .insert(_to_row(record))
                .execute()
            )
            return ProductResponse(**result.data[0])
        except Exception as e:
            logger.error(
                "insert_product_failed",
                code=record.get("code"),
                error=str(e)
            )
            raise DatabaseError("insert", str(e))

    def update_product(self, product_id: str, record: dict) -> ProductResponse:
        """Overwrite the given fields of one product row."""
        try:
            result = (
                self.db.table(self.table)
                .update(_to_row(record))
                .eq("id", product_id)
                .execute()
            )
            if not result.data:
                raise ProductNotFoundError(product_id)
            return ProductResponse(**result.data[0])
        except ProductNotFoundError:
            raise
        except Exception as e:
            logger.error(
                "update_product_failed",
                product_id=product_id,
                error=str(e)
            )
            raise DatabaseError("update", str(e))

    def delete_product(self, product_id: str) -> None:
        """Remove one product row."""
        try:
            self.db.table(self.table).delete().eq("id", product_id).execute()
        except Exception as e:
            logger.error(
                "delete_product_failed",
                product_id=product_id,
                error=str(e)
            )
            raise DatabaseError("delete", str(e))

    # ===================
    # BULK OPERATIONS
    # ===================

    def insert_products(self, records: list[dict]) -> int:
        """
        Insert many product rows, BULK_CHUNK_SIZE rows per request.

        Returns:
            Number of rows inserted

        Raises:
            DatabaseError: On the first failed chunk; details["inserted"]
                holds the rows written before it
        """
        if not records:
            return 0

        logger.info("bulk_insert_products", count=len(records))

        inserted = 0
        for chunk in _chunks(records, BULK_CHUNK_SIZE):
            try:
                result = (
                    self.db.table(self.table)
                    .insert([_to_row(r) for r in chunk])
                    .execute()
                )
            except Exception as e:
                logger.error(
                    "bulk_insert_products_failed",
                    inserted=inserted,
                    total=len(records),
                    error=str(e)
                )
                raise DatabaseError(
                    "insert", str(e), details={"inserted": inserted, "total": len(records)}
                )
            inserted += len(result.data)

        return inserted

    def delete_products(self, product_ids: list[str]) -> int:
        """
        Delete many product rows, BULK_CHUNK_SIZE ids per request.

        Returns:
            Number of ids submitted for deletion

        Raises:
            DatabaseError: On the first failed chunk; details["deleted"]
                holds the ids deleted before it
        """
        if not product_ids:
            return 0

        logger.info("bulk_delete_products", count=len(product_ids))

        deleted = 0
        for chunk in _chunks(product_ids, BULK_CHUNK_SIZE):
            try:
                self.db.table(self.table).delete().in_("id", chunk).execute()
            except Exception as e:
                logger.error(
                    "bulk_delete_products_failed",
                    deleted=deleted,
                    total=len(product_ids),
                    error=str(e)
                )
                raise DatabaseError(
                    "delete", str(e), details={"deleted": deleted, "total": len(product_ids)}
                )
            deleted += len(chunk)

        return deleted

    # ===================
    # UTILITY METHODS
    # ===================

    def count(self) -> int:
        """Count total products."""
        try:
            result = self.db.table(self.table).select("id", count="exact").execute()
            return result.count or 0
        except Exception as e:
            logger.error("count_products_failed", error=str(e))
            raise DatabaseError("count", str(e))


# Singleton instance for convenience
_product_service: Optional[ProductService] = None

def get_product_service() -> ProductService:
    """Get or create ProductService instance."""
    global _product_service
    if _product_service is None:
        _product_service = ProductService()
    return _product_service
