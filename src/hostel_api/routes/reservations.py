"""Reservation endpoints: take and return slots over a date range.

Both operations are all-or-nothing across the nights of
[check_in, check_out). Neither is idempotent on its own; clients retrying
after a timeout or 503 should resend the same ``idempotency_key``.
"""

import logging

from fastapi import APIRouter, Depends
from starlette.status import HTTP_201_CREATED

from hostel_api.dependencies import get_engine
from hostel_api.models.reservations import ReservationRequest
from hostel_api.security import require_capability
from hostel_ledger.models.enums import Capability
from hostel_ledger.models.identity import Identity
from hostel_ledger.models.reservation import ReleaseAck, ReservationConfirmation
from hostel_ledger.services.reservations import ReservationEngine

logger = logging.getLogger(__name__)

router = APIRouter(tags=["reservations"])


@router.post(
    "/rooms/{room_id}/reservations",
    summary="Reserve slots",
    description="""
Atomically take `quantity` slots on every night of [check_in, check_out).

**Requires the reserve capability.**

**Notes:**
- If any night is short, nothing is reserved and the response names the
  first failing night
- A gap in configured inventory returns 409 (incomplete range)
""",
    response_model=ReservationConfirmation,
    status_code=HTTP_201_CREATED,
    responses={
        400: {"description": "Invalid quantity, dates or idempotency key"},
        409: {"description": "Insufficient availability, incomplete range or contention"},
        503: {"description": "Storage unavailable; outcome unknown, retry with the same key"},
    },
)
def create_reservation(
    room_id: str,
    body: ReservationRequest,
    identity: Identity = Depends(require_capability(Capability.RESERVE)),
    engine: ReservationEngine = Depends(get_engine),
) -> ReservationConfirmation:
    confirmation = engine.reserve(
        room_id,
        body.check_in,
        body.check_out,
        body.quantity,
        idempotency_key=body.idempotency_key,
    )
    logger.info(
        "Reservation %s created for room %s by %s",
        confirmation.reservation_id,
        room_id,
        identity.subject,
    )
    return confirmation


@router.post(
    "/rooms/{room_id}/releases",
    summary="Release slots",
    description="""
Atomically return `quantity` slots to every night of [check_in, check_out).

**Requires the release capability.**

Releasing more than was reserved on any night is refused without changing
the ledger and reported as an internal error.
""",
    response_model=ReleaseAck,
    responses={
        400: {"description": "Invalid quantity, dates or idempotency key"},
        409: {"description": "Incomplete range or contention"},
        500: {"description": "Release would exceed total slots"},
    },
)
def release_reservation(
    room_id: str,
    body: ReservationRequest,
    identity: Identity = Depends(require_capability(Capability.RELEASE)),
    engine: ReservationEngine = Depends(get_engine),
) -> ReleaseAck:
    ack = engine.release(
        room_id,
        body.check_in,
        body.check_out,
        body.quantity,
        idempotency_key=body.idempotency_key,
    )
    logger.info("Released slots for room %s by %s", room_id, identity.subject)
    return ack
