"""Health check endpoint."""

from typing import Any

from fastapi import APIRouter

from hostel_ledger import __version__

router = APIRouter(tags=["health"])


@router.get("/health", summary="Health check")
def health() -> dict[str, Any]:
    """Liveness probe; does not touch storage."""
    return {"status": "healthy", "version": __version__}
