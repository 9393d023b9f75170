"""Availability endpoints for reading a room's ledger.

Public, read-only views over the availability ledger. All dates are in
YYYY-MM-DD format and check_out is exclusive.
"""

import datetime as dt

from fastapi import APIRouter, Depends, Query

from hostel_api.dependencies import get_ledger
from hostel_api.models.availability import AvailabilityDay, AvailabilityRangeResponse
from hostel_ledger.models.availability import AvailabilityRecord
from hostel_ledger.services.ledger import AvailabilityLedger

router = APIRouter(tags=["availability"])


@router.get(
    "/rooms/{room_id}/availability",
    summary="Get availability over a date range",
    description="""
Return one entry per night of [check_in, check_out).

**Notes:**
- Every night must have inventory configured; a gap returns 409 naming the
  first missing day
- `min_available_slots` is the largest quantity a single reservation could
  take across the whole range
""",
    response_model=AvailabilityRangeResponse,
    responses={
        400: {"description": "check_out is before check_in"},
        409: {"description": "Some night in the range has no inventory"},
    },
)
def get_availability_range(
    room_id: str,
    check_in: dt.date = Query(..., description="First night (YYYY-MM-DD)", examples=["2024-01-01"]),
    check_out: dt.date = Query(
        ..., description="Departure day, exclusive (YYYY-MM-DD)", examples=["2024-01-03"]
    ),
    ledger: AvailabilityLedger = Depends(get_ledger),
) -> AvailabilityRangeResponse:
    days = [AvailabilityDay.from_record(r) for r in ledger.list_range(room_id, check_in, check_out)]
    return AvailabilityRangeResponse(
        room_id=room_id,
        check_in=check_in,
        check_out=check_out,
        days=days,
        total_nights=len(days),
        min_available_slots=min((d.available_slots for d in days), default=None),
    )


@router.get(
    "/rooms/{room_id}/availability/{date}",
    summary="Get availability for one day",
    response_model=AvailabilityRecord,
    responses={404: {"description": "No inventory configured for that day"}},
)
def get_availability_day(
    room_id: str,
    date: dt.date,
    ledger: AvailabilityLedger = Depends(get_ledger),
) -> AvailabilityRecord:
    """Absence is reported as 404, distinct from a day with zero slots left."""
    return ledger.get(room_id, date)
