"""
Custom exception classes for the application.

Every error carries a stable code, a human-readable message and the HTTP
status the routes answer with.
"""

from typing import Optional, Any
from datetime import datetime


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "PRODUCT_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.utcnow().isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ConflictError(AppError):
    """Conflict with existing resource (409)."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details
        )


class DuplicateError(ConflictError):
    """Duplicate resource (409)."""

    def __init__(
        self,
        resource: str,
        field: str,
        value: str
    ):
        super().__init__(
            code=f"{resource.upper()}_{field.upper()}_EXISTS",
            message=f"{resource} with this {field} already exists",
            details={field: value}
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


class DatabaseError(AppError):
    """Database operation failed (500)."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# PRODUCT / CATEGORY ERRORS
# ===================

class ProductNotFoundError(NotFoundError):
    """Product not found."""

    def __init__(self, product_id: str):
        super().__init__(
            resource="Product",
            identifier=product_id,
            code="PRODUCT_NOT_FOUND"
        )


class CategoryExistsError(DuplicateError):
    """Category name already exists."""

    def __init__(self, name: str):
        super().__init__(
            resource="Category",
            field="name",
            value=name
        )


# ===================
# CATALOG IMPORT ERRORS
# ===================

class ExcelParseError(ValidationError):
    """Excel file parsing failed."""

    def __init__(
        self,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="EXCEL_PARSE_ERROR",
            message=message,
            details=details
        )


class EmptySpreadsheetError(ValidationError):
    """Spreadsheet has a header but no data rows."""

    def __init__(self):
        super().__init__(
            code="EMPTY_SPREADSHEET",
            message="The spreadsheet has no product rows"
        )


class NoValidProductsError(ValidationError):
    """Rows were submitted but none passed validation."""

    def __init__(self, submitted: int):
        super().__init__(
            code="NO_VALID_PRODUCTS",
            message=(
                "No valid products found. Check that code, name, "
                "price and category are filled in."
            ),
            details={"submitted": submitted, "valid": 0}
        )


class CatalogImportError(AppError):
    """Import aborted while changing the stored catalog."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            code="CATALOG_IMPORT_FAILED",
            message=message,
            status_code=500,
            details=details
        )


# ===================
# CLIENT ERRORS
# ===================

class ClientNotFoundError(NotFoundError):
    """Client not found."""

    def __init__(self, client_id: str):
        super().__init__(
            resource="Client",
            identifier=client_id,
            code="CLIENT_NOT_FOUND"
        )


class InvalidContactError(ValidationError):
    """Client contact is missing required fields."""

    def __init__(self, missing: list[str]):
        super().__init__(
            code="CLIENT_INVALID_CONTACT",
            message="Contact name and phone are required",
            details={"missing": missing}
        )


# ===================
# ORDER ERRORS
# ===================

class OrderNotFoundError(NotFoundError):
    """Order not found."""

    def __init__(self, order_id: str):
        super().__init__(
            resource="Order",
            identifier=order_id,
            code="ORDER_NOT_FOUND"
        )


class EmptyOrderError(ValidationError):
    """Order has no line items."""

    def __init__(self):
        super().__init__(
            code="ORDER_EMPTY",
            message="Add at least one item to the order"
        )


class OrderItemNotFoundError(NotFoundError):
    """Line item index out of range."""

    def __init__(self, order_id: str, index: int):
        super().__init__(
            resource="Order item",
            identifier=f"{order_id}[{index}]",
            code="ORDER_ITEM_NOT_FOUND"
        )


# ===================
# USER ERRORS
# ===================

class UserNotFoundError(NotFoundError):
    """User not found."""

    def __init__(self, user_id: str):
        super().__init__(
            resource="User",
            identifier=user_id,
            code="USER_NOT_FOUND"
        )


class UsernameExistsError(DuplicateError):
    """Username already taken."""

    def __init__(self, username: str):
        super().__init__(
            resource="User",
            field="username",
            value=username
        )


class PasswordRequiredError(ValidationError):
    """New users need a password."""

    def __init__(self):
        super().__init__(
            code="USER_PASSWORD_REQUIRED",
            message="Password is required for new users"
        )


class SelfDeletionError(ValidationError):
    """A user tried to delete their own account."""

    def __init__(self, user_id: str):
        super().__init__(
            code="USER_SELF_DELETION",
            message="You cannot delete your own user",
            details={"id": user_id}
        )


# ===================
# INSIGHTS ERRORS
# ===================

class InsightsError(ExternalServiceError):
    """Claude API call for dashboard insights failed."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            service="insights",
            message=message,
            details=details
        )
