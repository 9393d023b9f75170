"""API models for inventory management endpoints."""

import datetime as dt

from pydantic import BaseModel, Field, model_validator

from hostel_ledger.models.availability import AvailabilityRecord

# Upper bounds on a single request's write volume
MAX_SEED_HORIZON_DAYS = 366
MAX_SLOTS_PER_DAY = 1000


class SeedInventoryRequest(BaseModel):
    """Request body for seeding a room's horizon.

    Without ``horizon_days`` the room is treated as newly created and
    receives the configured default horizon starting today.
    """

    capacity: int = Field(
        ..., ge=0, le=MAX_SLOTS_PER_DAY, description="Slots per day", examples=[4]
    )
    horizon_days: int | None = Field(
        default=None,
        ge=1,
        le=MAX_SEED_HORIZON_DAYS,
        description="Days to seed (defaults to the configured horizon)",
    )
    from_date: dt.date | None = Field(default=None, description="First day (defaults to today)")


class ExtendHorizonRequest(BaseModel):
    """Request body for extending a room's horizon.

    ``horizon_end`` may lie at most a year past today, or past ``from_date``
    when that is later.
    """

    total_slots: int = Field(
        ..., ge=0, le=MAX_SLOTS_PER_DAY, description="Slots per day for the new records"
    )
    horizon_end: dt.date = Field(..., description="Last day that should have a record")
    from_date: dt.date | None = Field(
        default=None, description="First day when the room has no records yet"
    )

    @model_validator(mode="after")
    def validate_horizon_end(self) -> "ExtendHorizonRequest":
        anchor = max(dt.date.today(), self.from_date or dt.date.min)
        if self.horizon_end > anchor + dt.timedelta(days=MAX_SEED_HORIZON_DAYS):
            raise ValueError(
                f"horizon_end cannot be more than {MAX_SEED_HORIZON_DAYS} days ahead"
            )
        return self


class CapacityChangeRequest(BaseModel):
    capacity: int = Field(..., ge=1, le=MAX_SLOTS_PER_DAY, description="New slots per day")


class InventoryResponse(BaseModel):
    """Records created by a seed or extension."""

    room_id: str
    created_days: int = Field(..., ge=0)
    first_date: dt.date | None = None
    last_date: dt.date | None = None

    @classmethod
    def from_records(cls, room_id: str, records: list[AvailabilityRecord]) -> "InventoryResponse":
        return cls(
            room_id=room_id,
            created_days=len(records),
            first_date=records[0].date if records else None,
            last_date=records[-1].date if records else None,
        )
