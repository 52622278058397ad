"""
Domain error taxonomy shared by every service.

Services raise these; the HTTP layer turns them into JSON responses with the
status code each class carries. Database failures are answered with a generic
message and logged in full.
"""
import structlog
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = structlog.get_logger(__name__)


class DomainError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    kind = "domain_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    kind = "not_found"


class ValidationError(DomainError):
    kind = "validation_error"


class InsufficientStockError(DomainError):
    kind = "insufficient_stock"

    def __init__(self, message: str, product_ids: list[int] | None = None):
        super().__init__(message)
        self.product_ids = product_ids or []


class CartEmptyError(DomainError):
    kind = "cart_empty"


class PaymentFailedError(DomainError):
    kind = "payment_failed"


class UnauthorizedError(DomainError):
    status_code = status.HTTP_403_FORBIDDEN
    kind = "unauthorized"


class ConflictError(DomainError):
    kind = "conflict"


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.kind},
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(
        "database_error",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error", "error": "infrastructure"},
    )


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
