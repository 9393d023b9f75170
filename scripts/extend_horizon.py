#!/usr/bin/env python3
"""Extend the availability horizon of one or more rooms.

Meant to run on a schedule (cron, EventBridge) so that every room always
has inventory for the next N days. Re-running with the same horizon is a
no-op.

Usage:
    python scripts/extend_horizon.py --room room-101:4 --room room-102:2
    python scripts/extend_horizon.py --room room-101:4 --days 60
"""

import argparse
import datetime as dt
import sys

from hostel_ledger.config import Settings
from hostel_ledger.models.errors import InventoryError
from hostel_ledger.services.dynamodb import DynamoDBService
from hostel_ledger.services.initializer import InventoryInitializer
from hostel_ledger.services.ledger import AvailabilityLedger
from hostel_ledger.utils.logging import configure_logging


def parse_room(value: str) -> tuple[str, int]:
    """Parse ROOM_ID:SLOTS."""
    room_id, sep, slots = value.rpartition(":")
    if not sep or not room_id:
        raise argparse.ArgumentTypeError(f"expected ROOM_ID:SLOTS, got {value!r}")
    try:
        return room_id, int(slots)
    except ValueError:
        raise argparse.ArgumentTypeError(f"slots must be an integer in {value!r}") from None


def main(argv: list[str] | None = None) -> int:
    """Run the horizon extension script."""
    settings = Settings.from_env()

    parser = argparse.ArgumentParser(description="Extend room availability horizons")
    parser.add_argument(
        "--room",
        dest="rooms",
        action="append",
        type=parse_room,
        required=True,
        metavar="ROOM_ID:SLOTS",
        help="Room to extend and its slots per day (repeatable)",
    )
    parser.add_argument(
        "--days",
        type=int,
        default=settings.horizon_days,
        help=f"Days ahead of today to cover (default: {settings.horizon_days})",
    )
    args = parser.parse_args(argv)
    if args.days < 1:
        parser.error("--days must be at least 1")

    configure_logging(settings.log_level)

    today = dt.date.today()
    horizon_end = today + dt.timedelta(days=args.days - 1)

    db = DynamoDBService(settings)
    initializer = InventoryInitializer(db, AvailabilityLedger(db))
    failures = 0
    try:
        for room_id, slots in args.rooms:
            try:
                records = initializer.extend_horizon(room_id, slots, horizon_end, from_date=today)
            except InventoryError as e:
                failures += 1
                print(f"  ❌ {room_id}: {e.code.value} {e.message}")
                continue
            print(f"  ✓ {room_id}: {len(records)} new days through {horizon_end.isoformat()}")
    finally:
        db.close()

    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
