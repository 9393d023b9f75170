"""Availability ledger: per (room, day) inventory records."""

import datetime as dt
from collections.abc import Iterator
from typing import TYPE_CHECKING

from hostel_ledger.models.availability import AvailabilityRecord
from hostel_ledger.models.errors import (
    ConflictError,
    IncompleteRangeError,
    NotFoundError,
    ValidationError,
)
from hostel_ledger.utils.calendar import day_key
from hostel_ledger.utils.logging import get_logger

from .dynamodb import AVAILABILITY_TABLE

if TYPE_CHECKING:
    from .dynamodb import DynamoDBService

logger = get_logger(__name__)

RANGE_KEY_CONDITION = "room_id = :room AND #d BETWEEN :start AND :last"
# Idempotency markers sort after every ISO date in the same partition
LATEST_KEY_CONDITION = "room_id = :room AND #d <= :max"


class AvailabilityRange:
    """Lazy, restartable view of a room's records over [start, end).

    Every iteration issues a fresh query, so iterating twice reflects the
    ledger as it is at that moment. Iteration yields records in ascending
    date order and raises IncompleteRangeError at the first day that has
    no record.
    """

    def __init__(
        self,
        ledger: "AvailabilityLedger",
        room_id: str,
        start: dt.date,
        end: dt.date,
    ) -> None:
        self.ledger = ledger
        self.room_id = room_id
        self.start = start
        self.end = end

    def __len__(self) -> int:
        return (self.end - self.start).days

    def __iter__(self) -> Iterator[AvailabilityRecord]:
        expected = self.start
        for record in self.ledger.query_records(self.room_id, self.start, self.end):
            if record.date != expected:
                raise IncompleteRangeError(self.room_id, expected)
            yield record
            expected += dt.timedelta(days=1)
        if expected < self.end:
            raise IncompleteRangeError(self.room_id, expected)


class AvailabilityLedger:
    """Service for creating and reading availability records."""

    TABLE = AVAILABILITY_TABLE

    def __init__(self, db: "DynamoDBService") -> None:
        """Initialize the ledger.

        Args:
            db: DynamoDB service instance
        """
        self.db = db

    def find(self, room_id: str, date: dt.date | dt.datetime) -> AvailabilityRecord | None:
        """Get the record for a room and day, or None when absent."""
        item = self.db.get_item(
            self.TABLE,
            {"room_id": room_id, "date": day_key(date).isoformat()},
        )
        return AvailabilityRecord.from_item(item) if item else None

    def get(self, room_id: str, date: dt.date | dt.datetime) -> AvailabilityRecord:
        """Get the record for a room and day.

        Absence means "no inventory configured", which is not the same as
        zero slots available.

        Raises:
            NotFoundError: If no record exists
        """
        key = day_key(date)
        record = self.find(room_id, key)
        if record is None:
            raise NotFoundError(room_id, key)
        return record

    def get_or_create(
        self,
        room_id: str,
        date: dt.date | dt.datetime,
        total_slots: int,
    ) -> AvailabilityRecord:
        """Return the existing record or create it fully available.

        Args:
            room_id: Room identifier
            date: Day (time of day is ignored)
            total_slots: Capacity for a newly created record

        Returns:
            The existing or newly created record

        Raises:
            ValidationError: If total_slots is negative
            ConflictError: If a concurrent create won the race; read with get()
        """
        if total_slots < 0:
            raise ValidationError("total_slots must be non-negative")

        key = day_key(date)
        existing = self.find(room_id, key)
        if existing is not None:
            return existing

        now = dt.datetime.now(dt.UTC)
        record = AvailabilityRecord(
            room_id=room_id,
            date=key,
            total_slots=total_slots,
            available_slots=total_slots,
            created_at=now,
            updated_at=now,
        )
        created = self.db.put_item(
            self.TABLE,
            record.to_item(),
            condition_expression="attribute_not_exists(room_id)",
        )
        if not created:
            logger.info("Lost create race for room %s on %s", room_id, key)
            raise ConflictError(room_id, key)
        return record

    def list_range(
        self,
        room_id: str,
        start_date: dt.date | dt.datetime,
        end_date: dt.date | dt.datetime,
    ) -> AvailabilityRange:
        """Records for [start_date, end_date) in ascending date order.

        Args:
            room_id: Room identifier
            start_date: First day (inclusive)
            end_date: Last day (exclusive)

        Returns:
            A lazy iterable; IncompleteRangeError is raised during iteration
            at the first day without a record

        Raises:
            ValidationError: If end_date is before start_date
        """
        start = day_key(start_date)
        end = day_key(end_date)
        if end < start:
            raise ValidationError("end_date must not be before start_date")
        return AvailabilityRange(self, room_id, start, end)

    def query_records(
        self,
        room_id: str,
        start: dt.date,
        end: dt.date,
    ) -> Iterator[AvailabilityRecord]:
        """Existing records in [start, end), skipping gaps silently."""
        if end <= start:
            return
        last = end - dt.timedelta(days=1)
        items = self.db.query(
            self.TABLE,
            RANGE_KEY_CONDITION,
            {":room": room_id, ":start": start.isoformat(), ":last": last.isoformat()},
            expression_attribute_names={"#d": "date"},
        )
        for item in items:
            yield AvailabilityRecord.from_item(item)

    def latest_date(self, room_id: str) -> dt.date | None:
        """Latest day that has a record for the room, or None."""
        items = self.db.query(
            self.TABLE,
            LATEST_KEY_CONDITION,
            {":room": room_id, ":max": dt.date.max.isoformat()},
            expression_attribute_names={"#d": "date"},
            scan_index_forward=False,
            limit=1,
        )
        for item in items:
            return dt.date.fromisoformat(item["date"])
        return None
