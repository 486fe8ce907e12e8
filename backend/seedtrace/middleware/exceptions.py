"""Custom exception handlers for consistent error responses.

Provides the project exception base, standardized error formatting and
logging of identifier failures.  Invariant violations (exhausted sequences,
duplicate mappings) are logged at error level so they reach alerting.
Unique-constraint failures never reach this layer: the mapping store turns
them into DuplicateFull / DuplicateShort.
"""

import logging
from typing import Union

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class SeedTraceException(Exception):
    """Base exception for SeedTrace application errors."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: str = "INTERNAL_ERROR",
        details: dict | None = None,
        alert: bool = False,
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        # True for invariant violations that an operator must look at
        self.alert = alert
        super().__init__(self.message)


def create_error_response(
    status_code: int,
    message: str,
    error_code: str = "ERROR",
    details: Union[dict, list, None] = None,
) -> JSONResponse:
    """Create standardized error response.

    Format:
    {
        "error": {
            "code": "ERROR_CODE",
            "message": "Human-readable error message",
            "details": {...}  // Optional additional details
        }
    }
    """
    content = {
        "error": {
            "code": error_code,
            "message": message,
        }
    }

    if details:
        content["error"]["details"] = details

    return JSONResponse(
        status_code=status_code,
        content=content,
    )


def _request_extra(request: Request) -> dict:
    return {"path": request.url.path, "method": request.method}


async def seedtrace_exception_handler(
    request: Request,
    exc: SeedTraceException,
) -> JSONResponse:
    """Render an engine error.  Invariant violations are logged at error level."""
    log = logger.error if exc.alert else logger.warning
    log(
        f"Identifier request rejected: {exc.error_code} - {exc.message}",
        extra={"error_code": exc.error_code, **_request_extra(request)},
    )
    return create_error_response(
        status_code=exc.status_code,
        message=exc.message,
        error_code=exc.error_code,
        details=exc.details,
    )


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    """Unknown routes and wrong methods, in the same envelope as engine errors."""
    return create_error_response(
        status_code=exc.status_code,
        message=str(exc.detail),
        error_code=f"HTTP_{exc.status_code}",
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Request bodies that fail schema checks, before the engine sees them."""
    errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"] if loc != "body"),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
    logger.warning(
        f"Rejected request body on {request.url.path}",
        extra={"errors": errors, **_request_extra(request)},
    )
    return create_error_response(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        message="Request body does not describe a valid identifier request",
        error_code="VALIDATION_ERROR",
        details={"errors": errors},
    )


async def operational_exception_handler(
    request: Request,
    exc: OperationalError,
) -> JSONResponse:
    """Counter or mapping store unreachable or locked.  Nothing was issued."""
    logger.error(
        f"Identifier store unavailable on {request.url.path}: {exc.orig}",
        extra=_request_extra(request),
    )
    return create_error_response(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        message="Identifier store unavailable, retry the request",
        error_code="DATABASE_UNAVAILABLE",
    )


async def general_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    logger.exception(
        f"Unhandled error on {request.url.path}", extra=_request_extra(request)
    )
    return create_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        message="Internal error while handling the identifier request",
        error_code="INTERNAL_ERROR",
    )


def register_exception_handlers(app):
    """Register the SeedTrace error envelope on every failure path."""
    app.add_exception_handler(SeedTraceException, seedtrace_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(OperationalError, operational_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
