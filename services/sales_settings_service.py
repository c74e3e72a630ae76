"""
Sales settings service.

The settings table holds a single row. Reads fall back to defaults
when it has not been saved yet; saving updates the row or creates it.
"""

from typing import Optional
import structlog

from config import get_supabase_client
from models.sales_settings import (
    SalesSettingsUpdate,
    SalesSettingsResponse,
)
from exceptions import DatabaseError

logger = structlog.get_logger(__name__)


class SalesSettingsService:
    """Read and save the sales settings row."""

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "settings"

    def get(self) -> SalesSettingsResponse:
        """Current settings, or defaults when none are stored."""
        try:
            result = self.db.table(self.table).select("*").limit(1).execute()
        except Exception as e:
            logger.error("get_sales_settings_failed", error=str(e))
            raise DatabaseError("select", str(e))

        if not result.data:
            logger.debug("sales_settings_defaults")
            return SalesSettingsResponse()

        return SalesSettingsResponse(**result.data[0])

    def save(self, data: SalesSettingsUpdate) -> SalesSettingsResponse:
        """Update the settings row, creating it on first save."""
        current = self.get()
        row = {
            "commercial_policy": data.commercial_policy,
            "freight_options": data.freight_options,
            "min_order_value": float(data.min_order_value),
        }

        logger.info(
            "saving_sales_settings",
            exists=current.id is not None,
            freight_options=len(data.freight_options)
        )

        try:
            if current.id:
                result = (
                    self.db.table(self.table)
                    .update(row)
                    .eq("id", current.id)
                    .execute()
                )
            else:
                result = self.db.table(self.table).insert(row).execute()
        except Exception as e:
            logger.error("save_sales_settings_failed", error=str(e))
            raise DatabaseError("update" if current.id else "insert", str(e))

        return SalesSettingsResponse(**result.data[0])


# Singleton instance for convenience
_sales_settings_service: Optional[SalesSettingsService] = None

def get_sales_settings_service() -> SalesSettingsService:
    """Get or create SalesSettingsService instance."""
    global _sales_settings_service
    if _sales_settings_service is None:
        _sales_settings_service = SalesSettingsService()
    return _sales_settings_service
