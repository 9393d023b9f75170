"""Unit tests for AvailabilityLedger against mocked DynamoDB."""

import datetime as dt
from collections.abc import Callable

import pytest

from hostel_ledger.models.errors import (
    ConflictError,
    IncompleteRangeError,
    NotFoundError,
    ValidationError,
)
from hostel_ledger.services.dynamodb import AVAILABILITY_TABLE, DynamoDBService
from hostel_ledger.services.ledger import AvailabilityLedger

ROOM = "room-101"
JAN_1 = dt.date(2024, 1, 1)


class TestGetOrCreate:
    """Tests for get_or_create."""

    def test_creates_fully_available_record(self, ledger: AvailabilityLedger) -> None:
        record = ledger.get_or_create(ROOM, JAN_1, 4)

        assert record.total_slots == 4
        assert record.available_slots == 4
        assert ledger.get(ROOM, JAN_1) == record

    def test_returns_existing_record_unchanged(self, ledger: AvailabilityLedger) -> None:
        first = ledger.get_or_create(ROOM, JAN_1, 4)
        second = ledger.get_or_create(ROOM, JAN_1, 10)

        assert second == first
        assert second.total_slots == 4

    def test_timestamps_on_same_day_share_a_record(self, ledger: AvailabilityLedger) -> None:
        ledger.get_or_create(ROOM, dt.datetime(2024, 1, 1, 8, 0), 4)
        record = ledger.get_or_create(ROOM, dt.datetime(2024, 1, 1, 22, 0), 7)

        assert record.total_slots == 4

    def test_negative_total_rejected(self, ledger: AvailabilityLedger) -> None:
        with pytest.raises(ValidationError):
            ledger.get_or_create(ROOM, JAN_1, -1)

    def test_zero_total_allowed(self, ledger: AvailabilityLedger) -> None:
        assert ledger.get_or_create(ROOM, JAN_1, 0).available_slots == 0

    def test_lost_create_race_raises_conflict(
        self, ledger: AvailabilityLedger, db: DynamoDBService
    ) -> None:
        """A concurrent writer creating the row between read and put is reported, not overwritten."""
        ledger.find = lambda room_id, date: None  # type: ignore[method-assign]
        db.put_item(
            AVAILABILITY_TABLE,
            {"room_id": ROOM, "date": "2024-01-01", "total_slots": 2, "available_slots": 1},
        )

        with pytest.raises(ConflictError) as exc_info:
            ledger.get_or_create(ROOM, JAN_1, 9)

        assert exc_info.value.details == {"room_id": ROOM, "date": "2024-01-01"}
        item = db.get_item(AVAILABILITY_TABLE, {"room_id": ROOM, "date": "2024-01-01"})
        assert item is not None
        assert item["available_slots"] == 1


class TestGet:
    """Tests for get and find."""

    def test_missing_record_raises_not_found(self, ledger: AvailabilityLedger) -> None:
        with pytest.raises(NotFoundError) as exc_info:
            ledger.get(ROOM, JAN_1)
        assert exc_info.value.details["date"] == "2024-01-01"

    def test_find_returns_none_for_missing(self, ledger: AvailabilityLedger) -> None:
        assert ledger.find(ROOM, JAN_1) is None

    def test_zero_available_is_not_absence(self, ledger: AvailabilityLedger) -> None:
        ledger.get_or_create(ROOM, JAN_1, 0)
        assert ledger.get(ROOM, JAN_1).available_slots == 0


class TestListRange:
    """Tests for list_range."""

    def test_returns_records_in_date_order(
        self, ledger: AvailabilityLedger, seed_room: Callable
    ) -> None:
        seed_room(3, 5)

        records = list(ledger.list_range(ROOM, JAN_1, dt.date(2024, 1, 4)))

        assert [r.date for r in records] == [
            dt.date(2024, 1, 1),
            dt.date(2024, 1, 2),
            dt.date(2024, 1, 3),
        ]

    def test_empty_range_yields_nothing(self, ledger: AvailabilityLedger) -> None:
        assert list(ledger.list_range(ROOM, JAN_1, JAN_1)) == []

    def test_end_before_start_rejected(self, ledger: AvailabilityLedger) -> None:
        with pytest.raises(ValidationError):
            ledger.list_range(ROOM, dt.date(2024, 1, 3), JAN_1)

    def test_gap_raises_incomplete_range_naming_first_missing_day(
        self, ledger: AvailabilityLedger
    ) -> None:
        ledger.get_or_create(ROOM, dt.date(2024, 1, 1), 2)
        ledger.get_or_create(ROOM, dt.date(2024, 1, 3), 2)

        with pytest.raises(IncompleteRangeError) as exc_info:
            list(ledger.list_range(ROOM, JAN_1, dt.date(2024, 1, 4)))

        assert exc_info.value.missing_date == dt.date(2024, 1, 2)

    def test_trailing_gap_raises_incomplete_range(
        self, ledger: AvailabilityLedger, seed_room: Callable
    ) -> None:
        seed_room(2, 2)

        with pytest.raises(IncompleteRangeError) as exc_info:
            list(ledger.list_range(ROOM, JAN_1, dt.date(2024, 1, 5)))

        assert exc_info.value.missing_date == dt.date(2024, 1, 3)

    def test_range_is_restartable_and_reflects_current_state(
        self, ledger: AvailabilityLedger, seed_room: Callable, db: DynamoDBService
    ) -> None:
        seed_room(2, 2)
        view = ledger.list_range(ROOM, JAN_1, dt.date(2024, 1, 3))

        first = [r.available_slots for r in view]
        db.put_item(
            AVAILABILITY_TABLE,
            {"room_id": ROOM, "date": "2024-01-02", "total_slots": 2, "available_slots": 0},
        )
        second = [r.available_slots for r in view]

        assert len(view) == 2
        assert first == [2, 2]
        assert second == [2, 0]

    def test_other_rooms_are_not_included(
        self, ledger: AvailabilityLedger, seed_room: Callable
    ) -> None:
        seed_room(2, 2)
        seed_room(9, 2, room_id="room-102")

        records = list(ledger.list_range(ROOM, JAN_1, dt.date(2024, 1, 3)))

        assert {r.room_id for r in records} == {ROOM}


class TestLatestDate:
    """Tests for latest_date."""

    def test_none_without_records(self, ledger: AvailabilityLedger) -> None:
        assert ledger.latest_date(ROOM) is None

    def test_returns_last_seeded_day(self, ledger: AvailabilityLedger, seed_room: Callable) -> None:
        seed_room(2, 10)
        assert ledger.latest_date(ROOM) == dt.date(2024, 1, 10)
