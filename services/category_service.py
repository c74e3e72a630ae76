"""
Category service.

Categories are plain names. They are never deleted; imports only add.
"""

from typing import Optional
import structlog

from config import get_supabase_client
from exceptions import (
    CategoryExistsError,
    DatabaseError
)

logger = structlog.get_logger(__name__)


class CategoryService:
    """Category reads and inserts (category side of the catalog store)."""

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "categories"

    def list_categories(self) -> list[str]:
        """All category names, sorted."""
        try:
            result = self.db.table(self.table).select("name").execute()
            names = sorted({row["name"] for row in result.data if row.get("name")})
            logger.debug("categories_retrieved", count=len(names))
            return names
        except Exception as e:
            logger.error("get_categories_failed", error=str(e))
            raise DatabaseError("select", str(e))

    def insert_category(self, name: str) -> str:
        """Insert one category row without checking for duplicates."""
        try:
            self.db.table(self.table).insert({"name": name}).execute()
            return name
        except Exception as e:
            logger.error("insert_category_failed", name=name, error=str(e))
            raise DatabaseError("insert", str(e))

    def create(self, name: str) -> str:
        """
        Create a category.

        Raises:
            CategoryExistsError: If the name is already taken
        """
        name = name.strip()
        logger.info("creating_category", name=name)

        if name in self.list_categories():
            raise CategoryExistsError(name)

        self.insert_category(name)
        logger.info("category_created", name=name)
        return name


# Singleton instance for convenience
_category_service: Optional[CategoryService] = None

def get_category_service() -> CategoryService:
    """Get or create CategoryService instance."""
    global _category_service
    if _category_service is None:
        _category_service = CategoryService()
    return _category_service
