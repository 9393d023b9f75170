"""Inventory initializer: bulk creation of availability records."""

import datetime as dt
from typing import TYPE_CHECKING, Any

from hostel_ledger.models.availability import AvailabilityRecord
from hostel_ledger.models.enums import InventoryOperation
from hostel_ledger.models.errors import ConflictError, ValidationError
from hostel_ledger.utils.calendar import date_range, day_key
from hostel_ledger.utils.logging import get_logger, log_inventory_operation

from .dynamodb import AVAILABILITY_TABLE

if TYPE_CHECKING:
    from .dynamodb import DynamoDBService
    from .ledger import AvailabilityLedger

logger = get_logger(__name__)

# DynamoDB TransactWriteItems accepts at most 100 actions
TRANSACTION_CHUNK_SIZE = 100


class InventoryInitializer:
    """Service for seeding a room's availability horizon."""

    TABLE = AVAILABILITY_TABLE

    def __init__(self, db: "DynamoDBService", ledger: "AvailabilityLedger") -> None:
        """Initialize the initializer.

        Args:
            db: DynamoDB service instance
            ledger: Ledger used to look for existing records
        """
        self.db = db
        self.ledger = ledger

    def seed(
        self,
        room_id: str,
        total_slots: int,
        horizon_days: int,
        from_date: dt.date | dt.datetime,
    ) -> list[AvailabilityRecord]:
        """Create ``horizon_days`` fully available records starting at from_date.

        Re-seeding is refused rather than skipped: a caller that wants to
        add days to an existing horizon must use extend_horizon().

        Args:
            room_id: Room identifier
            total_slots: Slots per day (room capacity)
            horizon_days: Number of consecutive days to create
            from_date: First day (time of day is ignored)

        Returns:
            The created records in date order

        Raises:
            ValidationError: On negative slots or a non-positive horizon
            ConflictError: If any target day already has a record
        """
        if not room_id:
            raise ValidationError("room_id is required", {"field": "room_id"})
        if total_slots < 0:
            raise ValidationError("total_slots must be non-negative", {"field": "total_slots"})
        if horizon_days < 1:
            raise ValidationError("horizon_days must be at least 1", {"field": "horizon_days"})

        start = day_key(from_date)
        end = start + dt.timedelta(days=horizon_days)

        for existing in self.ledger.query_records(room_id, start, end):
            raise ConflictError(room_id, existing.date)

        now = dt.datetime.now(dt.UTC)
        records = [
            AvailabilityRecord(
                room_id=room_id,
                date=day,
                total_slots=total_slots,
                available_slots=total_slots,
                created_at=now,
                updated_at=now,
            )
            for day in date_range(start, end)
        ]

        written: list[AvailabilityRecord] = []
        for offset in range(0, len(records), TRANSACTION_CHUNK_SIZE):
            chunk = records[offset : offset + TRANSACTION_CHUNK_SIZE]
            outcome = self.db.transact_write([self._put_action(r) for r in chunk])
            if not outcome.succeeded:
                failed = outcome.first_failed_condition
                conflict_date = chunk[failed].date if failed is not None else chunk[0].date
                self._rollback(written)
                log_inventory_operation(
                    logger,
                    InventoryOperation.SEED.value,
                    room_id=room_id,
                    check_in=start,
                    check_out=end,
                    quantity=total_slots,
                    result="rejected",
                    error=f"conflict on {conflict_date.isoformat()}",
                )
                raise ConflictError(room_id, conflict_date)
            written.extend(chunk)

        log_inventory_operation(
            logger,
            InventoryOperation.SEED.value,
            room_id=room_id,
            check_in=start,
            check_out=end,
            quantity=total_slots,
            days=len(written),
        )
        return written

    def extend_horizon(
        self,
        room_id: str,
        total_slots: int,
        new_horizon_end: dt.date | dt.datetime,
        from_date: dt.date | dt.datetime | None = None,
    ) -> list[AvailabilityRecord]:
        """Seed the days after the latest existing record up to new_horizon_end.

        ``new_horizon_end`` is the last day that should have a record. Running
        again with the same end date creates nothing.

        Args:
            room_id: Room identifier
            total_slots: Slots per day for the new records
            new_horizon_end: Last day of the horizon (inclusive)
            from_date: First day to seed when the room has no records yet.
                Defaults to today.

        Returns:
            The newly created records (empty when already covered)

        Raises:
            ValidationError: On negative slots
            ConflictError: If a concurrent writer created overlapping days
                without reaching new_horizon_end
        """
        end = day_key(new_horizon_end)
        latest = self.ledger.latest_date(room_id)
        if latest is not None:
            start = latest + dt.timedelta(days=1)
        else:
            start = day_key(from_date) if from_date is not None else dt.date.today()

        if start > end:
            logger.info("Horizon for room %s already reaches %s", room_id, end.isoformat())
            return []

        try:
            records = self.seed(room_id, total_slots, (end - start).days + 1, start)
        except ConflictError:
            # A concurrent extension may already have covered the same days
            latest = self.ledger.latest_date(room_id)
            if latest is not None and latest >= end:
                logger.info("Concurrent extension already covered room %s", room_id)
                return []
            raise

        log_inventory_operation(
            logger,
            InventoryOperation.EXTEND_HORIZON.value,
            room_id=room_id,
            check_in=start,
            check_out=end + dt.timedelta(days=1),
            quantity=total_slots,
            days=len(records),
        )
        return records

    def _put_action(self, record: AvailabilityRecord) -> dict[str, Any]:
        return {
            "Put": {
                "TableName": self.db.table_name(self.TABLE),
                "Item": self.db.serialize(record.to_item()),
                "ConditionExpression": "attribute_not_exists(room_id)",
            }
        }

    def _rollback(self, records: list[AvailabilityRecord]) -> None:
        """Delete records created earlier in a seed that later hit a conflict.

        Only untouched records (no slots reserved yet) are removed.
        """
        for offset in range(0, len(records), TRANSACTION_CHUNK_SIZE):
            chunk = records[offset : offset + TRANSACTION_CHUNK_SIZE]
            actions = [
                {
                    "Delete": {
                        "TableName": self.db.table_name(self.TABLE),
                        "Key": self.db.serialize(
                            {"room_id": r.room_id, "date": r.date.isoformat()}
                        ),
                        "ConditionExpression": "available_slots = total_slots",
                    }
                }
                for r in chunk
            ]
            outcome = self.db.transact_write(actions)
            if not outcome.succeeded:
                logger.error(
                    "Could not roll back %d seeded records for room %s starting %s: %s",
                    len(chunk),
                    chunk[0].room_id,
                    chunk[0].date.isoformat(),
                    outcome.reasons,
                )
