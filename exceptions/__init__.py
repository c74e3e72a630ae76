"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ConflictError,
    DuplicateError,
    ExternalServiceError,
    DatabaseError,

    # Products / categories
    ProductNotFoundError,
    CategoryExistsError,

    # Catalog import
    ExcelParseError,
    EmptySpreadsheetError,
    NoValidProductsError,
    CatalogImportError,

    # Clients
    ClientNotFoundError,
    InvalidContactError,

    # Orders
    OrderNotFoundError,
    OrderItemNotFoundError,
    EmptyOrderError,

    # Users
    UserNotFoundError,
    UsernameExistsError,
    PasswordRequiredError,
    SelfDeletionError,

    # Insights
    InsightsError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "DuplicateError",
    "ExternalServiceError",
    "DatabaseError",

    # Products / categories
    "ProductNotFoundError",
    "CategoryExistsError",

    # Catalog import
    "ExcelParseError",
    "EmptySpreadsheetError",
    "NoValidProductsError",
    "CatalogImportError",

    # Clients
    "ClientNotFoundError",
    "InvalidContactError",

    # Orders
    "OrderNotFoundError",
    "OrderItemNotFoundError",
    "EmptyOrderError",

    # Users
    "UserNotFoundError",
    "UsernameExistsError",
    "PasswordRequiredError",
    "SelfDeletionError",

    # Insights
    "InsightsError",
]
