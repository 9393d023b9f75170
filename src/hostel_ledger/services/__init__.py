"""Ledger services for hostel room inventory."""

from .dynamodb import AVAILABILITY_TABLE, DynamoDBService, TransactionOutcome
from .initializer import InventoryInitializer
from .ledger import AvailabilityLedger, AvailabilityRange
from .reservations import ReservationEngine
from .room_events import RoomInventoryHooks

__all__ = [
    "AVAILABILITY_TABLE",
    "AvailabilityLedger",
    "AvailabilityRange",
    "DynamoDBService",
    "InventoryInitializer",
    "ReservationEngine",
    "RoomInventoryHooks",
    "TransactionOutcome",
]
