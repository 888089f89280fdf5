import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.exceptions import BaseAPIException, NotFoundException, PersistenceException
from app.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)


def _error_json(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    details: Optional[dict[str, Any]] = None,
) -> JSONResponse:
    body = ErrorResponse.for_path(request.url.path, code, message, details)
    return JSONResponse(
        status_code=status_code, content=body.model_dump(exclude_none=True)
    )


async def api_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render a BaseAPIException with its own status and error code."""
    assert isinstance(exc, BaseAPIException)
    logger.warning(
        "API exception %s on %s %s: %s",
        exc.error_code,
        request.method,
        request.url.path,
        exc.message,
        extra={"error_code": exc.error_code, "details": exc.details},
    )
    return _error_json(
        request, exc.status_code, exc.error_code, exc.message, exc.details
    )


async def integrity_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Constraint violations from the database.

    A broken foreign key means the referenced row does not exist (404);
    anything else is a conflict (409).
    """
    assert isinstance(exc, IntegrityError)
    if "foreign key" in str(exc.orig).lower():
        return await api_exception_handler(
            request,
            NotFoundException(
                message="Referenced resource not found",
                error_code="REFERENCED_RESOURCE_NOT_FOUND",
            ),
        )

    logger.warning(
        "Integrity error on %s %s: %s",
        request.method,
        request.url.path,
        exc.orig,
    )
    return _error_json(
        request, 409, "INTEGRITY_ERROR", "Database constraint violation"
    )


async def database_error_handler(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, SQLAlchemyError)
    logger.error(
        "Database error %s on %s %s",
        type(exc).__name__,
        request.method,
        request.url.path,
        exc_info=exc,
    )
    return await api_exception_handler(
        request, PersistenceException(message="Database operation failed")
    )


async def unhandled_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Last resort 500 that does not leak internals."""
    logger.error(
        "Unhandled %s on %s %s",
        type(exc).__name__,
        request.method,
        request.url.path,
        exc_info=exc,
    )
    return _error_json(request, 500, "INTERNAL_ERROR", "An unexpected error occurred")


def register_exception_handlers(app: FastAPI) -> None:
    """Most specific first: API errors, integrity errors, other DB errors, rest."""
    app.add_exception_handler(BaseAPIException, api_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
