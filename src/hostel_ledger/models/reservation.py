"""Reservation models: the engine's input intent and its results."""

import datetime as dt
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from hostel_ledger.utils.calendar import date_range, day_key

# DynamoDB TransactWriteItems accepts at most 100 actions; one is kept for
# the idempotency marker
MAX_RANGE_NIGHTS = 99


class ReservationIntent(BaseModel):
    """Request to hold ``quantity`` units of a room over [check_in, check_out).

    Transient: never persisted on its own.
    """

    model_config = ConfigDict(frozen=True)

    room_id: str = Field(..., min_length=1)
    check_in: dt.date
    check_out: dt.date
    quantity: int = Field(..., gt=0)

    @field_validator("check_in", "check_out", mode="before")
    @classmethod
    def normalize_dates(cls, v: Any) -> dt.date:
        return day_key(v)

    @model_validator(mode="after")
    def validate_range(self) -> "ReservationIntent":
        """check_in must precede check_out and the stay must fit one transaction."""
        if self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        if self.nights > MAX_RANGE_NIGHTS:
            raise ValueError(f"date range cannot exceed {MAX_RANGE_NIGHTS} nights")
        return self

    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days

    @property
    def dates(self) -> list[dt.date]:
        return list(date_range(self.check_in, self.check_out))


class ReservationConfirmation(BaseModel):
    """Successful reservation of slots across a date range."""

    model_config = ConfigDict(frozen=True)

    reservation_id: str = Field(..., description="Identifier of this reservation")
    room_id: str
    check_in: dt.date
    check_out: dt.date
    quantity: int = Field(..., gt=0)
    dates: list[dt.date] = Field(..., description="Day keys that were decremented")
    created_at: dt.datetime


class ReleaseAck(BaseModel):
    """Acknowledgement that slots were returned to inventory."""

    model_config = ConfigDict(frozen=True)

    room_id: str
    check_in: dt.date
    check_out: dt.date
    quantity: int = Field(..., gt=0)
    dates: list[dt.date]
    released_at: dt.datetime
