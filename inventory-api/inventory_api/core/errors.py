"""
Typed exceptions for the inventory API and the handlers that render them.

Every error carries a class-level ``code`` (machine-readable), an HTTP
``status_code`` and its context as attributes, so callers catch by type and
the boundary renders structured detail instead of parsing messages.

    InventoryApiError
    +-- ValidationError            400
    |   +-- PurchaseAmountTooLargeError
    +-- UnauthorizedError          401
    |   +-- InvalidCredentialsError
    +-- ForbiddenError             403
    +-- NotFoundError              404
    |   +-- ProductNotFoundError
    |   +-- PurchaseNotFoundError
    +-- InsufficientStockError     400
    +-- ConflictError              409
    |   +-- DuplicateLotNumberError
    |   +-- DuplicateEmailError
    |   +-- ProductInUseError
    |   +-- ConcurrentUpdateError
    +-- InternalError              500
        +-- PurchaseTotalMismatchError

Response shape for every failure::

    {"success": false, "message": "...", "code": "...", ...detail}
"""

from decimal import Decimal
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

from inventory_api.core.logging_config import get_logger

logger = get_logger("errors")


class InventoryApiError(Exception):
    """Base exception for all inventory API errors."""

    code: str = "INVENTORY_API_ERROR"
    status_code: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def detail(self) -> dict[str, Any]:
        """Structured fields merged into the error response."""
        return {}


class ValidationError(InventoryApiError):
    """Malformed request, rejected before any transaction is opened."""

    code: str = "VALIDATION_ERROR"
    status_code: int = 400

    def __init__(self, message: str, errors: list[dict[str, str]] | None = None):
        self.errors = errors or []
        super().__init__(message)

    def detail(self) -> dict[str, Any]:
        return {"errors": self.errors} if self.errors else {}


class PurchaseAmountTooLargeError(ValidationError):
    """A line subtotal or purchase total does not fit the ledger's money columns."""

    code: str = "PURCHASE_AMOUNT_TOO_LARGE"

    def __init__(self, amount: Decimal, limit: Decimal):
        self.amount = amount
        self.limit = limit
        super().__init__(f"Purchase amount {amount} exceeds the maximum of {limit}")

    def detail(self) -> dict[str, Any]:
        return {"amount": str(self.amount), "limit": str(self.limit)}


class UnauthorizedError(InventoryApiError):
    code: str = "UNAUTHORIZED"
    status_code: int = 401


class InvalidCredentialsError(UnauthorizedError):
    code: str = "INVALID_CREDENTIALS"

    def __init__(self):
        super().__init__("Invalid email or password")


class ForbiddenError(InventoryApiError):
    code: str = "FORBIDDEN"
    status_code: int = 403


class NotFoundError(InventoryApiError):
    code: str = "NOT_FOUND"
    status_code: int = 404


class ProductNotFoundError(NotFoundError):
    code: str = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product with id {product_id} not found")

    def detail(self) -> dict[str, Any]:
        return {"productId": self.product_id}


class PurchaseNotFoundError(NotFoundError):
    code: str = "PURCHASE_NOT_FOUND"

    def __init__(self, purchase_id: int):
        self.purchase_id = purchase_id
        super().__init__(f"Purchase with id {purchase_id} not found")


class InsufficientStockError(InventoryApiError):
    """Requested quantity exceeds the stock observed inside the purchase scope."""

    code: str = "INSUFFICIENT_STOCK"
    status_code: int = 400

    def __init__(self, product_id: int, product_name: str, available: int, requested: int):
        self.product_id = product_id
        self.product_name = product_name
        self.available = available
        self.requested = requested
        super().__init__(
            f'Insufficient stock for product "{product_name}". '
            f"Available: {available}, requested: {requested}"
        )

    def detail(self) -> dict[str, Any]:
        return {
            "productId": self.product_id,
            "available": self.available,
            "requested": self.requested,
        }


class ConflictError(InventoryApiError):
    code: str = "CONFLICT"
    status_code: int = 409


class DuplicateLotNumberError(ConflictError):
    code: str = "DUPLICATE_LOT_NUMBER"

    def __init__(self, lot_number: str):
        self.lot_number = lot_number
        super().__init__(f"Lot number {lot_number} already exists")


class DuplicateEmailError(ConflictError):
    code: str = "DUPLICATE_EMAIL"

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Email {email} is already registered")


class ProductInUseError(ConflictError):
    code: str = "PRODUCT_IN_USE"

    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product with id {product_id} is referenced by purchases")


class ConcurrentUpdateError(ConflictError):
    """The database aborted the transaction to resolve a deadlock or serialization conflict."""

    code: str = "CONCURRENT_UPDATE"

    def __init__(self):
        super().__init__("The request conflicted with a concurrent update. Please retry.")


class InternalError(InventoryApiError):
    code: str = "INTERNAL_ERROR"
    status_code: int = 500


class PurchaseTotalMismatchError(InternalError):
    """Header total diverged from the sum of its line subtotals."""

    code: str = "PURCHASE_TOTAL_MISMATCH"

    def __init__(self, total: Decimal, line_sum: Decimal):
        self.total = total
        self.line_sum = line_sum
        super().__init__(f"Purchase total {total} does not match line sum {line_sum}")


def _error_body(message: str, **detail: Any) -> dict[str, Any]:
    return {"success": False, "message": message, **detail}


async def inventory_api_error_handler(request: Request, exc: InventoryApiError) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "request_failed",
        extra={
            "code": exc.code,
            "status_code": exc.status_code,
            "method": request.method,
            "path": request.url.path,
            "error": exc.message,
        },
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.message, code=exc.code, **exc.detail()),
    )


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(part) for part in err["loc"] if part != "body"),
            "message": err["msg"],
        }
        for err in exc.errors()
    ]
    logger.info("request_validation_failed", extra={"path": request.url.path, "errors": errors})
    return JSONResponse(
        status_code=ValidationError.status_code,
        content=_error_body("Validation errors", code=ValidationError.code, errors=errors),
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        message = f"Route not found: {request.method} {request.url.path}"
        logger.warning("route_not_found", extra={"method": request.method, "path": request.url.path})
    else:
        message = str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(message),
        headers=getattr(exc, "headers", None),
    )


# deadlock_detected, serialization_failure
_RETRYABLE_SQLSTATES = frozenset({"40P01", "40001"})


def _sqlstate(exc: OperationalError) -> str | None:
    orig = exc.orig
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


async def database_unavailable_handler(request: Request, exc: OperationalError) -> JSONResponse:
    if _sqlstate(exc) in _RETRYABLE_SQLSTATES:
        return await inventory_api_error_handler(request, ConcurrentUpdateError())

    logger.error(
        "database_unavailable",
        extra={"method": request.method, "path": request.url.path},
        exc_info=exc,
    )
    return JSONResponse(status_code=503, content=_error_body("Database connection error"))


def unhandled_error_handler(production: bool):
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "unhandled_exception",
            extra={"method": request.method, "path": request.url.path},
            exc_info=exc,
        )
        body = _error_body("Internal server error", code=InternalError.code)
        if not production:
            body["detail"] = f"{type(exc).__name__}: {exc}"
        return JSONResponse(status_code=500, content=body)

    return handler


def register_exception_handlers(app: FastAPI, production: bool = False) -> None:
    app.add_exception_handler(InventoryApiError, inventory_api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(OperationalError, database_unavailable_handler)
    app.add_exception_handler(Exception, unhandled_error_handler(production))
