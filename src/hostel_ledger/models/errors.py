"""Standard error codes for the inventory ledger.

Every failure surfaced by the ledger, the reservation engine or the API
boundary carries one of these codes so callers can branch on a stable,
machine-readable kind instead of parsing messages.
"""

import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ErrorCode(str, Enum):
    """Machine-readable error kinds."""

    # Input errors (ERR_INV_001-ERR_INV_002)
    VALIDATION = "ERR_INV_001"
    NOT_FOUND = "ERR_INV_002"

    # Ledger state errors (ERR_INV_003-ERR_INV_007)
    CONFLICT = "ERR_INV_003"
    INCOMPLETE_RANGE = "ERR_INV_004"
    INSUFFICIENT_AVAILABILITY = "ERR_INV_005"
    RELEASE_OVERFLOW = "ERR_INV_006"
    UNSUPPORTED_OPERATION = "ERR_INV_007"

    # Storage errors (ERR_STORE_001-ERR_STORE_002)
    CONTENTION = "ERR_STORE_001"
    STORAGE_UNAVAILABLE = "ERR_STORE_002"

    # Authentication error codes (ERR_AUTH_001-ERR_AUTH_002)
    AUTH_REQUIRED = "ERR_AUTH_001"
    FORBIDDEN = "ERR_AUTH_002"


# Human-readable error messages
ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.VALIDATION: "The request is invalid",
    ErrorCode.NOT_FOUND: "No inventory is configured for this room and date",
    ErrorCode.CONFLICT: "Inventory already exists for this room and date",
    ErrorCode.INCOMPLETE_RANGE: "Inventory has not been configured for every day in the range",
    ErrorCode.INSUFFICIENT_AVAILABILITY: "Not enough slots are available for the requested dates",
    ErrorCode.RELEASE_OVERFLOW: "Release would exceed the total slots for a day",
    ErrorCode.UNSUPPORTED_OPERATION: "This operation is not supported",
    ErrorCode.CONTENTION: "The dates are being updated by other requests",
    ErrorCode.STORAGE_UNAVAILABLE: "Inventory storage is temporarily unavailable",
    ErrorCode.AUTH_REQUIRED: "Authentication required to perform this action",
    ErrorCode.FORBIDDEN: "You do not have permission to perform this action",
}

# Recovery suggestions for callers
ERROR_RECOVERY: dict[ErrorCode, str] = {
    ErrorCode.VALIDATION: "Fix the request parameters and try again",
    ErrorCode.NOT_FOUND: "Seed inventory for the room before querying it",
    ErrorCode.CONFLICT: "Use the extend operation instead of seeding again, or read the existing record",
    ErrorCode.INCOMPLETE_RANGE: "Seed or extend the room's inventory horizon to cover the range",
    ErrorCode.INSUFFICIENT_AVAILABILITY: "Choose other dates or a smaller quantity",
    ErrorCode.RELEASE_OVERFLOW: "Check the caller's reservation accounting",
    ErrorCode.UNSUPPORTED_OPERATION: "Contact support to resize room inventory",
    ErrorCode.CONTENTION: "Try again shortly",
    ErrorCode.STORAGE_UNAVAILABLE: "Try again later; retry mutations only with the same idempotency key",
    ErrorCode.AUTH_REQUIRED: "Log in and send a bearer token",
    ErrorCode.FORBIDDEN: "Use an account with the required role",
}


class ErrorResponse(BaseModel):
    """Standard error response format.

    All API failures are returned in this shape.
    """

    model_config = ConfigDict(strict=True)

    success: bool = False
    error_code: ErrorCode
    message: str
    recovery: str
    details: Optional[dict[str, str]] = None

    @classmethod
    def from_code(
        cls,
        code: ErrorCode,
        details: Optional[dict[str, str]] = None,
    ) -> "ErrorResponse":
        """Create an ErrorResponse from an error code.

        Args:
            code: The error code
            details: Optional additional context about the error

        Returns:
            An ErrorResponse with the message and recovery hint for the code.
        """
        return cls(
            error_code=code,
            message=ERROR_MESSAGES[code],
            recovery=ERROR_RECOVERY[code],
            details=details,
        )


class InventoryError(Exception):
    """Base exception for ledger operations.

    Subclasses pin the error code; ``details`` carries string context
    such as the failing date.
    """

    code: ErrorCode = ErrorCode.VALIDATION

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[dict[str, str]] = None,
    ):
        self.message = message or ERROR_MESSAGES[self.code]
        self.recovery = ERROR_RECOVERY[self.code]
        self.details = details
        super().__init__(self.message)

    def to_response(self, include_details: bool = True) -> ErrorResponse:
        """Convert this exception to an ErrorResponse."""
        response = ErrorResponse.from_code(
            self.code, self.details if include_details else None
        )
        response.message = self.message
        return response


class ValidationError(InventoryError):
    """Bad input shape; raised before any storage access."""

    code = ErrorCode.VALIDATION


class NotFoundError(InventoryError):
    code = ErrorCode.NOT_FOUND

    def __init__(self, room_id: str, date: dt.date):
        super().__init__(
            f"No inventory configured for room {room_id} on {date.isoformat()}",
            {"room_id": room_id, "date": date.isoformat()},
        )


class ConflictError(InventoryError):
    code = ErrorCode.CONFLICT

    def __init__(self, room_id: str, date: Optional[dt.date] = None):
        details = {"room_id": room_id}
        message = f"Inventory already exists for room {room_id}"
        if date is not None:
            details["date"] = date.isoformat()
            message += f" on {date.isoformat()}"
        super().__init__(message, details)


class IncompleteRangeError(InventoryError):
    code = ErrorCode.INCOMPLETE_RANGE

    def __init__(self, room_id: str, missing_date: dt.date):
        self.missing_date = missing_date
        super().__init__(
            f"Room {room_id} has no inventory for {missing_date.isoformat()}",
            {"room_id": room_id, "date": missing_date.isoformat()},
        )


class InsufficientAvailabilityError(InventoryError):
    code = ErrorCode.INSUFFICIENT_AVAILABILITY

    def __init__(self, room_id: str, failing_date: dt.date, requested: int, available: Optional[int] = None):
        self.failing_date = failing_date
        details = {
            "room_id": room_id,
            "date": failing_date.isoformat(),
            "requested": str(requested),
        }
        if available is not None:
            details["available"] = str(available)
        super().__init__(
            f"Not enough slots for room {room_id} on {failing_date.isoformat()} "
            f"(requested {requested})",
            details,
        )


class ReleaseOverflowError(InventoryError):
    """Release would push available slots above total slots.

    Indicates an accounting bug in the caller, never clamped away.
    """

    code = ErrorCode.RELEASE_OVERFLOW

    def __init__(self, room_id: str, failing_date: dt.date, quantity: int):
        self.failing_date = failing_date
        super().__init__(
            f"Releasing {quantity} slots for room {room_id} on "
            f"{failing_date.isoformat()} exceeds total slots",
            {
                "room_id": room_id,
                "date": failing_date.isoformat(),
                "quantity": str(quantity),
            },
        )


class UnsupportedOperationError(InventoryError):
    code = ErrorCode.UNSUPPORTED_OPERATION


class ContentionError(InventoryError):
    """Transactions kept conflicting with concurrent writers; nothing was applied."""

    code = ErrorCode.CONTENTION


class StorageUnavailableError(InventoryError):
    """Storage fault. For mutations the outcome is unknown."""

    code = ErrorCode.STORAGE_UNAVAILABLE


class AuthenticationError(InventoryError):
    code = ErrorCode.AUTH_REQUIRED


class PermissionDeniedError(InventoryError):
    code = ErrorCode.FORBIDDEN
