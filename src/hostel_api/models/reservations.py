"""API models for reservation and release endpoints.

Quantity and date-order rules are enforced by the reservation engine so
that they surface as ERR_INV_001 rather than a request-shape error.
"""

import datetime as dt

from pydantic import BaseModel, Field


class ReservationRequest(BaseModel):
    """Request body for reserving or releasing slots over [check_in, check_out)."""

    check_in: dt.date = Field(..., description="First night", examples=["2024-01-01"])
    check_out: dt.date = Field(
        ..., description="Departure day (exclusive)", examples=["2024-01-03"]
    )
    quantity: int = Field(..., description="Slots per night", examples=[1])
    idempotency_key: str | None = Field(
        default=None,
        description="Caller key reused when retrying an ambiguous failure (max 36 characters)",
    )
