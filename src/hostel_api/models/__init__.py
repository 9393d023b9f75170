"""API request/response models."""

from .availability import AvailabilityDay, AvailabilityRangeResponse
from .common import ValidationErrorDetail, ValidationErrorResponse, format_validation_errors
from .inventory import (
    CapacityChangeRequest,
    ExtendHorizonRequest,
    InventoryResponse,
    SeedInventoryRequest,
)
from .reservations import ReservationRequest

__all__ = [
    "AvailabilityDay",
    "AvailabilityRangeResponse",
    "CapacityChangeRequest",
    "ExtendHorizonRequest",
    "InventoryResponse",
    "ReservationRequest",
    "SeedInventoryRequest",
    "ValidationErrorDetail",
    "ValidationErrorResponse",
    "format_validation_errors",
]
