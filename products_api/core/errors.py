"""Error Hierarchy: typed, categorized exceptions for all Products API failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Client errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST error envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with ProductsApiError base: one global handler catches all
    - ErrorContext as dataclass: observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Context attached to an error for logs and the response envelope."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    product_id: str | None = None
    operation: str | None = None
    debug_info: dict[str, Any] | None = None


class ProductsApiError(Exception):
    """Base exception for all Products API errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "product_id": self.context.product_id,
                    "operation": self.context.operation,
                },
            }
        }


# ─── Client Errors (400-level) ──────────────────────────────────

class InvalidProductIdError(ProductsApiError):
    """Path id is not a well-formed ObjectId."""
    def __init__(self, raw_id: str, context: ErrorContext | None = None):
        super().__init__(
            "Invalid product ID format",
            "INVALID_PRODUCT_ID", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.raw_id = raw_id


class EmptyUpdateError(ProductsApiError):
    """Update body had nothing left after cleaning."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "No valid fields to update",
            "NO_VALID_FIELDS", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )


class OutOfStockError(ProductsApiError):
    """Sell attempted on a product whose stock is not positive."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Product is out of stock",
            "OUT_OF_STOCK", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 400,
        )


class ResourceNotFoundError(ProductsApiError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.product_id = ctx.product_id or resource_id
        super().__init__(
            f"{resource_type} not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class RouteNotFoundError(ProductsApiError):
    """No route matches the request path."""
    def __init__(self, path: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.debug_info = {"path": path}
        super().__init__(
            "Route not found",
            "ROUTE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.WARNING, ctx, 404,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(ProductsApiError):
    """Document store operation failed. detail stays server-side."""
    def __init__(self, detail: str, operation: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.operation = ctx.operation or operation
        ctx.debug_info = {**(ctx.debug_info or {}), "detail": detail}
        super().__init__(
            "Server error while accessing products",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, ctx, 500,
        )
        self.detail = detail
        self.operation = operation
