"""Inventory management endpoints.

Vendors and admins seed and extend a room's availability horizon. Capacity
changes on a room with seeded inventory are refused with 501.

Known limitation: room ownership lives with the room catalogue, not the
ledger, so these routes do not check it. Any caller holding the
manage-inventory capability can seed or extend any ``room_id``. Request
bodies are bounded (see ``hostel_api.models.inventory``) to cap the writes
a single call can make.
"""

import datetime as dt
import logging

from fastapi import APIRouter, Depends
from starlette.status import HTTP_201_CREATED

from hostel_api.dependencies import get_initializer, get_room_hooks
from hostel_api.models.inventory import (
    CapacityChangeRequest,
    ExtendHorizonRequest,
    InventoryResponse,
    SeedInventoryRequest,
)
from hostel_api.security import require_capability
from hostel_ledger.models.enums import Capability
from hostel_ledger.models.identity import Identity
from hostel_ledger.services.initializer import InventoryInitializer
from hostel_ledger.services.room_events import RoomInventoryHooks

logger = logging.getLogger(__name__)

router = APIRouter(tags=["inventory"])

manage_inventory = require_capability(Capability.MANAGE_INVENTORY)


@router.post(
    "/rooms/{room_id}/inventory",
    summary="Seed a room's availability horizon",
    description="""
Create fully available records for consecutive days.

**Requires the manage-inventory capability.** Room ownership is not checked.

Without `horizon_days` the call is treated as a room-created event and
seeds the configured default horizon. Seeding days that already exist
returns 409 and leaves the ledger unchanged.
""",
    response_model=InventoryResponse,
    status_code=HTTP_201_CREATED,
    responses={
        400: {"description": "Invalid capacity or horizon"},
        409: {"description": "Some day already has inventory"},
    },
)
def seed_inventory(
    room_id: str,
    body: SeedInventoryRequest,
    identity: Identity = Depends(manage_inventory),
    hooks: RoomInventoryHooks = Depends(get_room_hooks),
    initializer: InventoryInitializer = Depends(get_initializer),
) -> InventoryResponse:
    logger.info("Seed requested for room %s by %s", room_id, identity.subject)
    if body.horizon_days is None:
        records = hooks.on_room_created(room_id, body.capacity, today=body.from_date)
    else:
        records = initializer.seed(
            room_id,
            body.capacity,
            body.horizon_days,
            body.from_date or dt.date.today(),
        )
    return InventoryResponse.from_records(room_id, records)


@router.post(
    "/rooms/{room_id}/inventory/extend",
    summary="Extend a room's availability horizon",
    description="""
Seed the days after the room's latest record up to `horizon_end` (inclusive).

**Requires the manage-inventory capability.** Room ownership is not checked.

Calling again with the same `horizon_end` creates nothing.
""",
    response_model=InventoryResponse,
)
def extend_inventory(
    room_id: str,
    body: ExtendHorizonRequest,
    identity: Identity = Depends(manage_inventory),
    initializer: InventoryInitializer = Depends(get_initializer),
) -> InventoryResponse:
    logger.info("Horizon extension requested for room %s by %s", room_id, identity.subject)
    records = initializer.extend_horizon(
        room_id,
        body.total_slots,
        body.horizon_end,
        from_date=body.from_date,
    )
    return InventoryResponse.from_records(room_id, records)


@router.put(
    "/rooms/{room_id}/inventory/capacity",
    summary="Change a room's capacity",
    responses={501: {"description": "Capacity changes are not supported"}},
)
def change_capacity(
    room_id: str,
    body: CapacityChangeRequest,
    identity: Identity = Depends(manage_inventory),
    hooks: RoomInventoryHooks = Depends(get_room_hooks),
) -> None:
    hooks.on_capacity_changed(room_id, body.capacity)
