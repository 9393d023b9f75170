"""Room lifecycle hooks consumed by the room-management side of the platform."""

import datetime as dt
from typing import TYPE_CHECKING

from hostel_ledger.models.availability import AvailabilityRecord
from hostel_ledger.models.errors import UnsupportedOperationError, ValidationError

if TYPE_CHECKING:
    from .initializer import InventoryInitializer


class RoomInventoryHooks:
    """Translate room lifecycle events into ledger operations."""

    def __init__(self, initializer: "InventoryInitializer", horizon_days: int = 30) -> None:
        self.initializer = initializer
        self.horizon_days = horizon_days

    def on_room_created(
        self,
        room_id: str,
        capacity: int,
        today: dt.date | None = None,
    ) -> list[AvailabilityRecord]:
        """Seed the default horizon for a newly created room.

        Raises:
            ValidationError: If capacity is not positive
            ConflictError: If the room already has inventory in the horizon
        """
        if capacity < 1:
            raise ValidationError("Room capacity must be a positive integer", {"field": "capacity"})
        return self.initializer.seed(
            room_id,
            capacity,
            self.horizon_days,
            today or dt.date.today(),
        )

    def on_capacity_changed(self, room_id: str, new_capacity: int) -> None:
        """Resizing existing inventory needs its own protocol and is refused."""
        raise UnsupportedOperationError(
            "Changing the capacity of a room with seeded inventory is not supported",
            {"room_id": room_id, "capacity": str(new_capacity)},
        )
