"""API models for availability endpoints."""

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field

from hostel_ledger.models.availability import AvailabilityRecord


class AvailabilityDay(BaseModel):
    """Availability of one room on one day."""

    model_config = ConfigDict(strict=True)

    date: dt.date = Field(..., description="Calendar day (YYYY-MM-DD)", examples=["2024-01-01"])
    total_slots: int = Field(..., ge=0, description="Bookable units for the day")
    available_slots: int = Field(..., ge=0, description="Units not yet reserved")

    @classmethod
    def from_record(cls, record: AvailabilityRecord) -> "AvailabilityDay":
        return cls(
            date=record.date,
            total_slots=record.total_slots,
            available_slots=record.available_slots,
        )


class AvailabilityRangeResponse(BaseModel):
    """Per-night availability of a room over [check_in, check_out)."""

    model_config = ConfigDict(
        strict=True,
        json_schema_extra={
            "examples": [
                {
                    "room_id": "room-101",
                    "check_in": "2024-01-01",
                    "check_out": "2024-01-03",
                    "days": [
                        {"date": "2024-01-01", "total_slots": 2, "available_slots": 1},
                        {"date": "2024-01-02", "total_slots": 2, "available_slots": 2},
                    ],
                    "total_nights": 2,
                    "min_available_slots": 1,
                }
            ]
        },
    )

    room_id: str
    check_in: dt.date
    check_out: dt.date = Field(..., description="Departure day (exclusive)")
    days: list[AvailabilityDay] = Field(default_factory=list)
    total_nights: int = Field(..., ge=0)
    min_available_slots: int | None = Field(
        default=None,
        description="Largest quantity reservable across the whole range (null for an empty range)",
    )
