"""Enumeration types for the inventory ledger."""

from enum import Enum


class Role(str, Enum):
    """Role tag carried by the verified identity token."""

    STUDENT = "student"
    VENDOR = "vendor"
    ADMIN = "admin"


class Capability(str, Enum):
    """Actions gated at the booking API boundary.

    Availability reads are public and need no capability.
    """

    RESERVE = "reserve"
    RELEASE = "release"
    MANAGE_INVENTORY = "manage_inventory"


class InventoryOperation(str, Enum):
    """Operation names used in structured logs."""

    SEED = "seed"
    EXTEND_HORIZON = "extend_horizon"
    RESERVE = "reserve"
    RELEASE = "release"
