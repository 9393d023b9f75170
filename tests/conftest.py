"""Pytest configuration and fixtures for the hostel inventory ledger tests.

This module provides reusable fixtures for testing:
- DynamoDB mocking with moto
- Ledger services wired around a mocked storage handle
- Bearer tokens for each role
"""

import base64
import datetime as dt
import json
import os
from collections.abc import Callable, Generator

import pytest
from moto import mock_aws

# === Environment Setup ===

# Set environment variables for testing before imports
os.environ.setdefault("AWS_DEFAULT_REGION", "eu-west-1")
os.environ.setdefault("DYNAMODB_TABLE_PREFIX", "test-hostel")

# Only set fake credentials for moto if no real credentials are present
if not os.environ.get("AWS_PROFILE") and not os.environ.get("AWS_ACCESS_KEY_ID"):
    os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
    os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")

from hostel_ledger.config import Settings  # noqa: E402
from hostel_ledger.models.availability import AvailabilityRecord  # noqa: E402
from hostel_ledger.services.dynamodb import DynamoDBService  # noqa: E402
from hostel_ledger.services.initializer import InventoryInitializer  # noqa: E402
from hostel_ledger.services.ledger import AvailabilityLedger  # noqa: E402
from hostel_ledger.services.reservations import ReservationEngine  # noqa: E402
from hostel_ledger.services.room_events import RoomInventoryHooks  # noqa: E402

ROOM_ID = "room-101"


# === DynamoDB Fixtures ===


@pytest.fixture
def aws_credentials() -> None:
    """Mocked AWS Credentials for moto."""
    if not os.environ.get("AWS_PROFILE"):
        os.environ["AWS_ACCESS_KEY_ID"] = "testing"
        os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
        os.environ["AWS_SECURITY_TOKEN"] = "testing"
        os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "eu-west-1"


@pytest.fixture
def settings() -> Settings:
    """Settings pointing at the mocked test tables."""
    return Settings(
        environment="test",
        table_prefix="test-hostel",
        region_name="eu-west-1",
        horizon_days=30,
        contention_max_retries=3,
        expose_error_details=True,
    )


@pytest.fixture
def db(aws_credentials: None, settings: Settings) -> Generator[DynamoDBService, None, None]:
    """Storage handle with the availability table created in moto."""
    with mock_aws():
        service = DynamoDBService(settings)
        service.create_availability_table()
        yield service
        service.close()


# === Service Fixtures ===


@pytest.fixture
def ledger(db: DynamoDBService) -> AvailabilityLedger:
    return AvailabilityLedger(db)


@pytest.fixture
def engine(db: DynamoDBService, ledger: AvailabilityLedger) -> ReservationEngine:
    """Reservation engine without backoff delays."""
    return ReservationEngine(db, ledger, backoff_seconds=0)


@pytest.fixture
def initializer(db: DynamoDBService, ledger: AvailabilityLedger) -> InventoryInitializer:
    return InventoryInitializer(db, ledger)


@pytest.fixture
def hooks(initializer: InventoryInitializer) -> RoomInventoryHooks:
    return RoomInventoryHooks(initializer, horizon_days=30)


@pytest.fixture
def seed_room(
    initializer: InventoryInitializer,
) -> Callable[..., list[AvailabilityRecord]]:
    """Seed a room starting 2024-01-01 unless told otherwise."""

    def _seed(
        total_slots: int,
        days: int,
        room_id: str = ROOM_ID,
        start: dt.date = dt.date(2024, 1, 1),
    ) -> list[AvailabilityRecord]:
        return initializer.seed(room_id, total_slots, days, start)

    return _seed


# === Auth Fixtures ===


def make_token(role: str | None, subject: str = "user-123") -> str:
    """Build an unsigned JWT carrying the given role claim."""

    def encode(data: dict[str, str]) -> str:
        raw = base64.urlsafe_b64encode(json.dumps(data).encode()).decode()
        return raw.rstrip("=")

    claims = {"sub": subject}
    if role is not None:
        claims["role"] = role
    return f"{encode({'alg': 'none', 'typ': 'JWT'})}.{encode(claims)}.signature"


@pytest.fixture
def jwt_token() -> Callable[..., str]:
    return make_token


@pytest.fixture
def auth_headers() -> Callable[[str], dict[str, str]]:
    """Authorization headers for a role name."""

    def _headers(role: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {make_token(role)}"}

    return _headers
