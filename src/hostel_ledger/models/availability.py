"""Availability record model.

One record holds the bookable inventory of one room on one calendar day.
"""

import datetime as dt
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from hostel_ledger.utils.calendar import day_key


class AvailabilityRecord(BaseModel):
    """Inventory for a single (room, day) pair."""

    model_config = ConfigDict(frozen=True)

    room_id: str = Field(..., min_length=1, description="Room identifier")
    date: dt.date = Field(..., description="Calendar day (YYYY-MM-DD)")
    total_slots: int = Field(..., ge=0, description="Bookable units for the day")
    available_slots: int = Field(..., ge=0, description="Units not yet reserved")
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None

    @field_validator("date", mode="before")
    @classmethod
    def normalize_date(cls, v: Any) -> dt.date:
        """Strip time-of-day from incoming timestamps."""
        return day_key(v)

    @model_validator(mode="after")
    def check_slot_bounds(self) -> "AvailabilityRecord":
        """Enforce 0 <= available_slots <= total_slots."""
        if self.available_slots > self.total_slots:
            raise ValueError("available_slots cannot exceed total_slots")
        return self

    @property
    def reserved_slots(self) -> int:
        return self.total_slots - self.available_slots

    def to_item(self) -> dict[str, Any]:
        """Convert to a DynamoDB item (plain Python values)."""
        item: dict[str, Any] = {
            "room_id": self.room_id,
            "date": self.date.isoformat(),
            "total_slots": self.total_slots,
            "available_slots": self.available_slots,
        }
        if self.created_at is not None:
            item["created_at"] = self.created_at.isoformat()
        if self.updated_at is not None:
            item["updated_at"] = self.updated_at.isoformat()
        return item

    @classmethod
    def from_item(cls, item: dict[str, Any]) -> "AvailabilityRecord":
        """Build a record from a deserialized DynamoDB item.

        Numbers come back from DynamoDB as Decimal and are coerced to int.
        """
        created_at = item.get("created_at")
        updated_at = item.get("updated_at")
        return cls(
            room_id=item["room_id"],
            date=dt.date.fromisoformat(item["date"]),
            total_slots=int(item["total_slots"]),
            available_slots=int(item["available_slots"]),
            created_at=dt.datetime.fromisoformat(created_at) if created_at else None,
            updated_at=dt.datetime.fromisoformat(updated_at) if updated_at else None,
        )
