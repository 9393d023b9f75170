"""FastAPI dependency providers for ledger services.

The storage handle and the services built on it live on ``app.state``;
they are created in the application lifespan and closed on shutdown.

Service Dependency Graph:
    DynamoDBService
        └── AvailabilityLedger
                ├── ReservationEngine
                └── InventoryInitializer
                        └── RoomInventoryHooks

Usage in routes:
    from hostel_api.dependencies import get_engine

    @router.post("/rooms/{room_id}/reservations")
    def reserve(engine: ReservationEngine = Depends(get_engine)):
        ...
"""

from typing import NamedTuple

from fastapi import Request

from hostel_ledger.config import Settings
from hostel_ledger.services.dynamodb import DynamoDBService
from hostel_ledger.services.initializer import InventoryInitializer
from hostel_ledger.services.ledger import AvailabilityLedger
from hostel_ledger.services.reservations import ReservationEngine
from hostel_ledger.services.room_events import RoomInventoryHooks


class LedgerServices(NamedTuple):
    """Services sharing one storage handle."""

    db: DynamoDBService
    ledger: AvailabilityLedger
    engine: ReservationEngine
    initializer: InventoryInitializer
    hooks: RoomInventoryHooks


def build_services(db: DynamoDBService, settings: Settings) -> LedgerServices:
    """Wire every service around a single storage handle."""
    ledger = AvailabilityLedger(db)
    initializer = InventoryInitializer(db, ledger)
    return LedgerServices(
        db=db,
        ledger=ledger,
        engine=ReservationEngine(db, ledger),
        initializer=initializer,
        hooks=RoomInventoryHooks(initializer, horizon_days=settings.horizon_days),
    )


def _services(request: Request) -> LedgerServices:
    services: LedgerServices = request.app.state.services
    return services


def get_settings(request: Request) -> Settings:
    settings: Settings = request.app.state.settings
    return settings


def get_ledger(request: Request) -> AvailabilityLedger:
    return _services(request).ledger


def get_engine(request: Request) -> ReservationEngine:
    return _services(request).engine


def get_initializer(request: Request) -> InventoryInitializer:
    return _services(request).initializer


def get_room_hooks(request: Request) -> RoomInventoryHooks:
    return _services(request).hooks
