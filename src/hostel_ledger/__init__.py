"""Per-room, per-day inventory ledger for the hostel booking platform."""

__version__ = "0.1.0"
