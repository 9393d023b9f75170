"""API route modules."""

from .availability import router as availability_router
from .health import router as health_router
from .inventory import router as inventory_router
from .reservations import router as reservations_router

__all__ = [
    "availability_router",
    "health_router",
    "inventory_router",
    "reservations_router",
]
