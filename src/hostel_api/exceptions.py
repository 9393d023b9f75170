"""FastAPI exception handlers for converting InventoryError to HTTP responses.

The ErrorCode-to-HTTP status mapping follows REST conventions:
- 400 Bad Request: Input validation
- 401 Unauthorized: Authentication required
- 403 Forbidden: Missing capability
- 404 Not Found: No inventory configured
- 409 Conflict: Ledger state refuses the request
- 500 Internal Server Error: Invariant violations (caller accounting bugs)
- 501 Not Implemented: Unsupported operations
- 503 Service Unavailable: Storage faults

Usage:
    from hostel_api.exceptions import register_exception_handlers
    register_exception_handlers(app)
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_422_UNPROCESSABLE_ENTITY,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_501_NOT_IMPLEMENTED,
    HTTP_503_SERVICE_UNAVAILABLE,
)

from hostel_api.models.common import format_validation_errors
from hostel_ledger.models.errors import ErrorCode, InventoryError

logger = logging.getLogger(__name__)

ERROR_CODE_TO_HTTP_STATUS: dict[ErrorCode, int] = {
    ErrorCode.VALIDATION: HTTP_400_BAD_REQUEST,
    ErrorCode.AUTH_REQUIRED: HTTP_401_UNAUTHORIZED,
    ErrorCode.FORBIDDEN: HTTP_403_FORBIDDEN,
    ErrorCode.NOT_FOUND: HTTP_404_NOT_FOUND,
    ErrorCode.CONFLICT: HTTP_409_CONFLICT,
    ErrorCode.INCOMPLETE_RANGE: HTTP_409_CONFLICT,
    ErrorCode.INSUFFICIENT_AVAILABILITY: HTTP_409_CONFLICT,
    ErrorCode.CONTENTION: HTTP_409_CONFLICT,
    ErrorCode.RELEASE_OVERFLOW: HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.UNSUPPORTED_OPERATION: HTTP_501_NOT_IMPLEMENTED,
    ErrorCode.STORAGE_UNAVAILABLE: HTTP_503_SERVICE_UNAVAILABLE,
}

# Codes whose details describe internals rather than the caller's request
INTERNAL_DETAIL_CODES = frozenset({ErrorCode.STORAGE_UNAVAILABLE})


def get_http_status_for_error(code: ErrorCode) -> int:
    """Get HTTP status code for an ErrorCode, defaulting to 400."""
    return ERROR_CODE_TO_HTTP_STATUS.get(code, HTTP_400_BAD_REQUEST)


async def inventory_error_handler(request: Request, exc: InventoryError) -> JSONResponse:
    """Convert InventoryError to a JSON ErrorResponse.

    Storage details are withheld unless the app is configured to expose them.
    """
    settings = getattr(request.app.state, "settings", None)
    expose = settings.expose_error_details if settings is not None else False
    include_details = expose or exc.code not in INTERNAL_DETAIL_CODES

    return JSONResponse(
        status_code=get_http_status_for_error(exc.code),
        content=exc.to_response(include_details=include_details).model_dump(mode="json"),
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Wrap FastAPI request validation errors in the standard error shape."""
    return JSONResponse(
        status_code=HTTP_422_UNPROCESSABLE_ENTITY,
        content=format_validation_errors(list(exc.errors())).model_dump(mode="json"),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback for uncaught exceptions; internal details are never returned."""
    logger.exception("Unhandled exception: %s", exc)

    error_response = {
        "success": False,
        "error_code": "ERR_INTERNAL",
        "message": "An unexpected error occurred",
        "recovery": "Please try again later or contact support",
        "details": None,
    }

    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app.

    Args:
        app: The FastAPI application instance.
    """
    app.add_exception_handler(InventoryError, inventory_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, request_validation_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, generic_exception_handler)
