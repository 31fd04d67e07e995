"""Error Handlers: global exception handlers for the Products API.

Invariants:
    - ProductsApiError → structured JSON with error code, message, severity
    - RequestValidationError → 400 with field-level error details
    - Unmatched routes → 404 ROUTE_NOT_FOUND; other HTTP errors keep their status
    - Exception (catch-all) → 500 that never leaks internal details
    - Every body carries code, message, category, severity and timestamp

Design Decisions:
    - Four-layer handler: domain, validation, HTTP, catch-all
    - Extracted from main.py: registered by the app factory
"""

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from products_api.core.errors import (
    ErrorCategory, ErrorSeverity, ProductsApiError, RouteNotFoundError,
)

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_products_error_handler(app)
    _register_validation_error_handler(app)
    _register_http_error_handler(app)
    _register_generic_error_handler(app)


def _products_error_response(exc: ProductsApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


def _register_products_error_handler(app: FastAPI) -> None:
    """Register domain/infrastructure error handler."""

    @app.exception_handler(ProductsApiError)
    async def products_error_handler(request: Request, exc: ProductsApiError):
        """Handle all Products API domain/infrastructure errors."""
        log = logger.error if exc.http_status >= 500 else logger.warning
        log(
            f"{type(exc).__name__}: {exc.message}",
            extra={
                "error_code": exc.code,
                "path": request.url.path,
                "method": request.method,
                "product_id": exc.context.product_id,
                "operation": exc.context.operation,
            },
        )
        return _products_error_response(exc)


def _envelope(
    code: str, message: str, category: str, severity: ErrorSeverity, **extra,
) -> dict:
    """Error body shaped like ProductsApiError.to_response()."""
    return {
        "error": {
            "code": code,
            "message": message,
            "category": category,
            "severity": severity.value,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            **extra,
        },
    }


def _register_validation_error_handler(app: FastAPI) -> None:
    """Body and parameter failures become 400 with one entry per field."""

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        details = _field_details(exc)
        logger.warning(
            f"Rejected {request.method} {request.url.path}: "
            f"{', '.join(d['field'] for d in details)}",
            extra={
                "error_code": "VALIDATION_ERROR",
                "path": request.url.path,
                "method": request.method,
            },
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_envelope(
                "VALIDATION_ERROR", "Invalid product data",
                ErrorCategory.VALIDATION.value, ErrorSeverity.ERROR,
                details=details,
            ),
        )


def _register_http_error_handler(app: FastAPI) -> None:
    """Register handler for routing-level HTTP errors (404, 405)."""

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_404_NOT_FOUND:
            logger.info(
                f"Route not found: {request.method} {request.url.path}",
                extra={"error_code": "ROUTE_NOT_FOUND", "path": request.url.path},
            )
            return _products_error_response(RouteNotFoundError(request.url.path))
        return JSONResponse(
            status_code=exc.status_code,
            content=_envelope(
                "HTTP_ERROR", str(exc.detail), "http", ErrorSeverity.WARNING,
            ),
            headers=getattr(exc, "headers", None),
        )


def _register_generic_error_handler(app: FastAPI) -> None:
    """Anything unmapped is a bare 500; the traceback goes to the log only."""

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        logger.error(
            f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}",
            exc_info=exc,
            extra={
                "error_code": "INTERNAL_ERROR",
                "path": request.url.path,
                "method": request.method,
            },
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_envelope(
                "INTERNAL_ERROR", "Products API could not complete the request",
                ErrorCategory.INTERNAL.value, ErrorSeverity.CRITICAL,
            ),
        )


def _field_details(exc: RequestValidationError) -> list[dict]:
    """One entry per failed field, keyed by its dotted location (body.price)."""
    return [
        {
            "field": ".".join(str(part) for part in e["loc"]),
            "message": e["msg"],
            "type": e["type"],
        }
        for e in exc.errors()
    ]
