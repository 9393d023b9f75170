"""Reservation engine: all-or-nothing reserve and release over date ranges.

Each call reads the range, rejects early when the current state already
rules the request out, then commits a single DynamoDB transaction whose
per-day condition expressions re-check the same rule at write time. The
transaction is serializable for the affected items, so two overlapping
reservations can never both drive a day below zero, and a refused request
leaves every day untouched.

A call carrying an idempotency key also puts a marker item for that key in
the same transaction. A retry finds the marker and replays the recorded
result instead of mutating the range again.
"""

import datetime as dt
import random
import time
import uuid
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError as PydanticValidationError

from hostel_ledger.models.availability import AvailabilityRecord
from hostel_ledger.models.enums import InventoryOperation
from hostel_ledger.models.errors import (
    ContentionError,
    IncompleteRangeError,
    InsufficientAvailabilityError,
    InventoryError,
    ReleaseOverflowError,
    ValidationError,
)
from hostel_ledger.models.reservation import (
    ReleaseAck,
    ReservationConfirmation,
    ReservationIntent,
)
from hostel_ledger.utils.logging import get_logger, log_inventory_operation

from .dynamodb import AVAILABILITY_TABLE

if TYPE_CHECKING:
    from .dynamodb import DynamoDBService
    from .ledger import AvailabilityLedger

logger = get_logger(__name__)

# A UUID fits
MAX_IDEMPOTENCY_KEY_LENGTH = 36

# Sort-key prefix of idempotency markers; day items use ISO dates
MARKER_PREFIX = "op#"


def build_intent(
    room_id: str,
    check_in: dt.date | dt.datetime,
    check_out: dt.date | dt.datetime,
    quantity: int,
) -> ReservationIntent:
    """Validate raw arguments into a ReservationIntent.

    Raises:
        ValidationError: On non-positive quantity or an empty/oversized range
    """
    try:
        return ReservationIntent(
            room_id=room_id,
            check_in=check_in,
            check_out=check_out,
            quantity=quantity,
        )
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(loc) for loc in first.get("loc", ())) or "request"
        raise ValidationError(
            f"Invalid reservation request: {first.get('msg', 'invalid value')}",
            {"field": field},
        ) from e

class ReservationEngine:
    """Service for reserving and releasing slots across date ranges."""

    TABLE = AVAILABILITY_TABLE

    def __init__(
        self,
        db: "DynamoDBService",
        ledger: "AvailabilityLedger",
        max_contention_retries: int | None = None,
        backoff_seconds: float = 0.05,
    ) -> None:
        """Initialize the engine.

        Args:
            db: DynamoDB service instance
            ledger: Ledger used for range reads
            max_contention_retries: Retries after a transaction conflict.
                Defaults to the storage settings.
            backoff_seconds: Base delay for jittered exponential backoff
        """
        self.db = db
        self.ledger = ledger
        self.max_contention_retries = (
            db.settings.contention_max_retries
            if max_contention_retries is None
            else max_contention_retries
        )
        self.backoff_seconds = backoff_seconds

    def reserve(
        self,
        room_id: str,
        check_in: dt.date | dt.datetime,
        check_out: dt.date | dt.datetime,
        quantity: int,
        idempotency_key: str | None = None,
    ) -> ReservationConfirmation:
        """Atomically take ``quantity`` slots on every night of [check_in, check_out).

        Without a key, two identical calls reserve twice. With an
        ``idempotency_key``, a repeat of the same request is applied at most
        once and returns the confirmation of the first successful call.

        Args:
            room_id: Room identifier
            check_in: First night
            check_out: Departure day (exclusive)
            quantity: Slots to take per night
            idempotency_key: Optional caller key (max 36 characters)

        Returns:
            ReservationConfirmation listing the affected days

        Raises:
            ValidationError: Bad input, or the key was used for another request
            IncompleteRangeError: Some night has no inventory configured
            InsufficientAvailabilityError: Names the first night short of quantity
            ContentionError: Conflicting transactions persisted; nothing applied
            StorageUnavailableError: Storage fault; outcome unknown
        """
        intent = build_intent(room_id, check_in, check_out, quantity)
        self._validate_idempotency_key(idempotency_key)

        def is_short(record: AvailabilityRecord) -> bool:
            return record.available_slots < intent.quantity

        created_at = self._commit(
            InventoryOperation.RESERVE,
            intent,
            idempotency_key,
            is_failing=is_short,
            build_action=self._decrement_action,
            on_failure=lambda record, date: InsufficientAvailabilityError(
                intent.room_id,
                date,
                intent.quantity,
                record.available_slots if record else None,
            ),
        )

        confirmation = ReservationConfirmation(
            reservation_id=idempotency_key or str(uuid.uuid4()),
            room_id=intent.room_id,
            check_in=intent.check_in,
            check_out=intent.check_out,
            quantity=intent.quantity,
            dates=intent.dates,
            created_at=created_at,
        )
        log_inventory_operation(
            logger,
            InventoryOperation.RESERVE.value,
            room_id=intent.room_id,
            check_in=intent.check_in,
            check_out=intent.check_out,
            quantity=intent.quantity,
            reservation_id=confirmation.reservation_id,
        )
        return confirmation

    def release(
        self,
        room_id: str,
        check_in: dt.date | dt.datetime,
        check_out: dt.date | dt.datetime,
        quantity: int,
        idempotency_key: str | None = None,
    ) -> ReleaseAck:
        """Atomically return ``quantity`` slots to every night of [check_in, check_out).

        Keys are scoped per operation, so a reservation's key can be reused
        for its release.

        Raises:
            ValidationError: Bad input, or the key was used for another request
            IncompleteRangeError: Some night has no inventory configured
            ReleaseOverflowError: A night would exceed its total slots; nothing applied
            ContentionError: Conflicting transactions persisted; nothing applied
            StorageUnavailableError: Storage fault; outcome unknown
        """
        intent = build_intent(room_id, check_in, check_out, quantity)
        self._validate_idempotency_key(idempotency_key)

        def overflows(record: AvailabilityRecord) -> bool:
            return record.available_slots + intent.quantity > record.total_slots

        released_at = self._commit(
            InventoryOperation.RELEASE,
            intent,
            idempotency_key,
            is_failing=overflows,
            build_action=self._increment_action,
            on_failure=lambda record, date: ReleaseOverflowError(
                intent.room_id, date, intent.quantity
            ),
        )

        log_inventory_operation(
            logger,
            InventoryOperation.RELEASE.value,
            room_id=intent.room_id,
            check_in=intent.check_in,
            check_out=intent.check_out,
            quantity=intent.quantity,
        )
        return ReleaseAck(
            room_id=intent.room_id,
            check_in=intent.check_in,
            check_out=intent.check_out,
            quantity=intent.quantity,
            dates=intent.dates,
            released_at=released_at,
        )

    def _commit(
        self,
        operation: InventoryOperation,
        intent: ReservationIntent,
        idempotency_key: str | None,
        is_failing: Callable[[AvailabilityRecord], bool],
        build_action: Callable[[ReservationIntent, AvailabilityRecord, str], dict[str, Any]],
        on_failure: Callable[[AvailabilityRecord | None, dt.date], InventoryError],
    ) -> dt.datetime:
        """Read, pre-check and transactionally apply one range mutation.

        Cancelled transactions are retried only when DynamoDB reports a
        conflict with another in-flight transaction; in that case nothing
        was applied, so a retry cannot double-apply.

        A keyed mutation also writes an operation marker in the same
        transaction. Once the marker exists the mutation is never applied
        again, and the marker's timestamp is returned instead.

        Returns:
            When the mutation was applied
        """
        for attempt in range(self.max_contention_retries + 1):
            recorded_at = self._recorded_at(operation, intent, idempotency_key)
            if recorded_at is not None:
                return recorded_at

            try:
                records = list(
                    self.ledger.list_range(intent.room_id, intent.check_in, intent.check_out)
                )
                for record in records:
                    if is_failing(record):
                        raise on_failure(record, record.date)

                now = dt.datetime.now(dt.UTC)
                actions = [build_action(intent, record, now.isoformat()) for record in records]
                if idempotency_key is not None:
                    actions.append(self._marker_action(operation, intent, idempotency_key, now))
                outcome = self.db.transact_write(actions)
                if outcome.succeeded:
                    return now

                if outcome.condition_failed_at(len(records)):
                    # Marker already written by a concurrent call with this key
                    continue

                failed_index = outcome.first_failed_condition
                if failed_index is not None and failed_index < len(records):
                    raise on_failure(None, records[failed_index].date)

                if not outcome.conflicted:
                    # No usable reasons: re-read to find the day that broke the rule
                    self._raise_if_failing(intent, is_failing, on_failure)
            except (IncompleteRangeError, InsufficientAvailabilityError, ReleaseOverflowError) as e:
                # An earlier attempt with this key may have committed after all
                recorded_at = self._recorded_at(operation, intent, idempotency_key)
                if recorded_at is not None:
                    return recorded_at
                self._log_refusal(operation, intent, e)
                raise

            if attempt < self.max_contention_retries:
                delay = self.backoff_seconds * (2**attempt) * random.uniform(0.5, 1.5)
                logger.info(
                    "%s for room %s conflicted with another transaction, retrying in %.3fs",
                    operation.value,
                    intent.room_id,
                    delay,
                )
                time.sleep(delay)

        recorded_at = self._recorded_at(operation, intent, idempotency_key)
        if recorded_at is not None:
            return recorded_at
        log_inventory_operation(
            logger,
            operation.value,
            room_id=intent.room_id,
            check_in=intent.check_in,
            check_out=intent.check_out,
            quantity=intent.quantity,
            result="rejected",
            error="contention",
        )
        raise ContentionError(
            details={"room_id": intent.room_id, "attempts": str(self.max_contention_retries + 1)}
        )

    def _raise_if_failing(
        self,
        intent: ReservationIntent,
        is_failing: Callable[[AvailabilityRecord], bool],
        on_failure: Callable[[AvailabilityRecord | None, dt.date], InventoryError],
    ) -> None:
        for record in self.ledger.list_range(intent.room_id, intent.check_in, intent.check_out):
            if is_failing(record):
                raise on_failure(record, record.date)

    @staticmethod
    def marker_date(operation: InventoryOperation, idempotency_key: str) -> str:
        """Sort key of the marker item for a keyed operation.

        Markers share the room's partition but never parse as an ISO date,
        so date-range queries skip them.
        """
        return f"{MARKER_PREFIX}{operation.value}#{idempotency_key}"

    def _marker_action(
        self,
        operation: InventoryOperation,
        intent: ReservationIntent,
        idempotency_key: str,
        now: dt.datetime,
    ) -> dict[str, Any]:
        """Put of the operation marker; fails if the key was already used."""
        return {
            "Put": {
                "TableName": self.db.table_name(self.TABLE),
                "Item": self.db.serialize(
                    {
                        "room_id": intent.room_id,
                        "date": self.marker_date(operation, idempotency_key),
                        "operation": operation.value,
                        "check_in": intent.check_in.isoformat(),
                        "check_out": intent.check_out.isoformat(),
                        "quantity": intent.quantity,
                        "recorded_at": now.isoformat(),
                    }
                ),
                "ConditionExpression": "attribute_not_exists(room_id)",
            }
        }

    def _recorded_at(
        self,
        operation: InventoryOperation,
        intent: ReservationIntent,
        idempotency_key: str | None,
    ) -> dt.datetime | None:
        """Timestamp of an already applied keyed operation, if any.

        Raises:
            ValidationError: The key was recorded for a different request
        """
        if idempotency_key is None:
            return None
        item = self.db.get_item(
            self.TABLE,
            {"room_id": intent.room_id, "date": self.marker_date(operation, idempotency_key)},
        )
        if item is None:
            return None
        if (
            item.get("check_in") != intent.check_in.isoformat()
            or item.get("check_out") != intent.check_out.isoformat()
            or int(item.get("quantity", 0)) != intent.quantity
        ):
            raise ValidationError(
                "Idempotency key was already used for a different request",
                {"field": "idempotency_key"},
            )
        logger.info(
            "%s for room %s with key %s was already applied, replaying",
            operation.value,
            intent.room_id,
            idempotency_key,
        )
        return dt.datetime.fromisoformat(item["recorded_at"])

    def _decrement_action(
        self, intent: ReservationIntent, record: AvailabilityRecord, now: str
    ) -> dict[str, Any]:
        """Conditional update taking slots from one day."""
        return {
            "Update": {
                "TableName": self.db.table_name(self.TABLE),
                "Key": self.db.serialize(
                    {"room_id": record.room_id, "date": record.date.isoformat()}
                ),
                "UpdateExpression": "SET available_slots = available_slots - :q, updated_at = :now",
                "ConditionExpression": "attribute_exists(room_id) AND available_slots >= :q",
                "ExpressionAttributeValues": self.db.serialize(
                    {":q": intent.quantity, ":now": now}
                ),
            }
        }

    def _increment_action(
        self, intent: ReservationIntent, record: AvailabilityRecord, now: str
    ) -> dict[str, Any]:
        """Conditional update returning slots to one day.

        Condition expressions cannot do arithmetic, so the ceiling
        ``total_slots - quantity`` is computed from the record just read and
        pinned together with ``total_slots`` itself.
        """
        return {
            "Update": {
                "TableName": self.db.table_name(self.TABLE),
                "Key": self.db.serialize(
                    {"room_id": record.room_id, "date": record.date.isoformat()}
                ),
                "UpdateExpression": "SET available_slots = available_slots + :q, updated_at = :now",
                "ConditionExpression": (
                    "attribute_exists(room_id) AND total_slots = :total "
                    "AND available_slots <= :ceiling"
                ),
                "ExpressionAttributeValues": self.db.serialize(
                    {
                        ":q": intent.quantity,
                        ":now": now,
                        ":total": record.total_slots,
                        ":ceiling": record.total_slots - intent.quantity,
                    }
                ),
            }
        }

    def _log_refusal(
        self,
        operation: InventoryOperation,
        intent: ReservationIntent,
        error: InventoryError,
    ) -> None:
        log_inventory_operation(
            logger,
            operation.value,
            room_id=intent.room_id,
            check_in=intent.check_in,
            check_out=intent.check_out,
            quantity=intent.quantity,
            result="defect" if isinstance(error, ReleaseOverflowError) else "rejected",
            error=error.message,
        )

    @staticmethod
    def _validate_idempotency_key(key: str | None) -> None:
        if key is not None and not 1 <= len(key) <= MAX_IDEMPOTENCY_KEY_LENGTH:
            raise ValidationError(
                f"idempotency_key must be 1-{MAX_IDEMPOTENCY_KEY_LENGTH} characters",
                {"field": "idempotency_key"},
            )
