"""Shared API request/response models.

Domain models (AvailabilityRecord, ReservationConfirmation, ...) live in
hostel_ledger.models; this module only covers HTTP-layer concerns such as
the request validation error wrapper.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from hostel_ledger.models.errors import ErrorCode, ErrorResponse

__all__ = [
    "ErrorCode",
    "ErrorResponse",
    "ValidationErrorDetail",
    "ValidationErrorResponse",
    "format_validation_errors",
]


class ValidationErrorDetail(BaseModel):
    """Detail of a single validation error."""

    model_config = ConfigDict(strict=True)

    loc: list[str | int] = Field(
        ...,
        description="Path to the field that failed validation",
        examples=[["body", "check_in"]],
    )
    msg: str = Field(..., description="Human-readable error message", examples=["Field required"])
    type: str = Field(..., description="Error type identifier", examples=["missing"])


class ValidationErrorResponse(BaseModel):
    """Response format for request validation errors (HTTP 422).

    Same envelope as ErrorResponse, with FastAPI's per-field errors as details.
    """

    model_config = ConfigDict(strict=True)

    success: bool = False
    error_code: str = "ERR_REQUEST_SHAPE"
    message: str = "Request validation failed"
    recovery: str = "Check the request parameters and try again"
    details: list[ValidationErrorDetail] = Field(default_factory=list)


def format_validation_errors(errors: list[dict[str, Any]]) -> ValidationErrorResponse:
    """Convert Pydantic validation errors to ValidationErrorResponse.

    Args:
        errors: List of error dicts from Pydantic's ValidationError.errors()

    Returns:
        ValidationErrorResponse ready for JSON serialization.
    """
    details = [
        ValidationErrorDetail(
            loc=[str(loc) for loc in error.get("loc", [])],
            msg=str(error.get("msg", "")),
            type=str(error.get("type", "")),
        )
        for error in errors
    ]
    return ValidationErrorResponse(details=details)
