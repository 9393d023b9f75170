"""Pydantic models for the hostel inventory ledger."""

from .availability import AvailabilityRecord
from .enums import Capability, InventoryOperation, Role
from .identity import Identity
from .errors import (
    ERROR_MESSAGES,
    ERROR_RECOVERY,
    AuthenticationError,
    ConflictError,
    ContentionError,
    ErrorCode,
    ErrorResponse,
    IncompleteRangeError,
    InsufficientAvailabilityError,
    InventoryError,
    NotFoundError,
    PermissionDeniedError,
    ReleaseOverflowError,
    StorageUnavailableError,
    UnsupportedOperationError,
    ValidationError,
)
from .reservation import (
    MAX_RANGE_NIGHTS,
    ReleaseAck,
    ReservationConfirmation,
    ReservationIntent,
)

__all__ = [
    # Enums
    "Capability",
    "InventoryOperation",
    "Role",
    # Availability
    "AvailabilityRecord",
    # Identity
    "Identity",
    # Reservation
    "MAX_RANGE_NIGHTS",
    "ReleaseAck",
    "ReservationConfirmation",
    "ReservationIntent",
    # Errors
    "ERROR_MESSAGES",
    "ERROR_RECOVERY",
    "AuthenticationError",
    "ConflictError",
    "ContentionError",
    "ErrorCode",
    "ErrorResponse",
    "IncompleteRangeError",
    "InsufficientAvailabilityError",
    "InventoryError",
    "NotFoundError",
    "PermissionDeniedError",
    "ReleaseOverflowError",
    "StorageUnavailableError",
    "UnsupportedOperationError",
    "ValidationError",
]
