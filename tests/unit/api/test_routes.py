"""Unit tests for ledger API routes.

Tests for:
- GET /api/rooms/{room_id}/availability - Range view
- GET /api/rooms/{room_id}/availability/{date} - Single day
- POST /api/rooms/{room_id}/inventory - Seed
- POST /api/rooms/{room_id}/inventory/extend - Horizon extension
- PUT /api/rooms/{room_id}/inventory/capacity - Unsupported
- POST /api/rooms/{room_id}/reservations - Reserve
- POST /api/rooms/{room_id}/releases - Release
"""

import datetime as dt
from collections.abc import Callable, Generator

import pytest
from fastapi.testclient import TestClient
from starlette.status import (
    HTTP_200_OK,
    HTTP_201_CREATED,
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_422_UNPROCESSABLE_ENTITY,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_501_NOT_IMPLEMENTED,
)

from hostel_api.main import create_app
from hostel_ledger.config import Settings
from hostel_ledger.services.dynamodb import DynamoDBService

ROOM = "room-101"


@pytest.fixture
def client(settings: Settings, db: DynamoDBService) -> Generator[TestClient, None, None]:
    """Test client bound to the mocked storage handle."""
    with TestClient(create_app(settings, db)) as test_client:
        yield test_client


@pytest.fixture
def vendor(auth_headers: Callable[[str], dict[str, str]]) -> dict[str, str]:
    return auth_headers("vendor")


@pytest.fixture
def student(auth_headers: Callable[[str], dict[str, str]]) -> dict[str, str]:
    return auth_headers("student")


def reservation_body(check_in: str, check_out: str, quantity: int, **extra: str) -> dict:
    return {"check_in": check_in, "check_out": check_out, "quantity": quantity, **extra}


class TestAvailabilityRoutes:
    """Tests for the public availability endpoints."""

    def test_range_lists_each_night(self, client: TestClient, seed_room: Callable) -> None:
        seed_room(3, 3)

        response = client.get(
            f"/api/rooms/{ROOM}/availability",
            params={"check_in": "2024-01-01", "check_out": "2024-01-03"},
        )

        assert response.status_code == HTTP_200_OK
        data = response.json()
        assert data["total_nights"] == 2
        assert [d["date"] for d in data["days"]] == ["2024-01-01", "2024-01-02"]
        assert data["min_available_slots"] == 3

    def test_range_with_gap_is_conflict(self, client: TestClient, seed_room: Callable) -> None:
        seed_room(3, 1)

        response = client.get(
            f"/api/rooms/{ROOM}/availability",
            params={"check_in": "2024-01-01", "check_out": "2024-01-03"},
        )

        assert response.status_code == HTTP_409_CONFLICT
        data = response.json()
        assert data["error_code"] == "ERR_INV_004"
        assert data["details"]["date"] == "2024-01-02"

    def test_range_end_before_start_is_bad_request(self, client: TestClient) -> None:
        response = client.get(
            f"/api/rooms/{ROOM}/availability",
            params={"check_in": "2024-01-03", "check_out": "2024-01-01"},
        )
        assert response.status_code == HTTP_400_BAD_REQUEST

    def test_malformed_date_is_request_shape_error(self, client: TestClient) -> None:
        response = client.get(
            f"/api/rooms/{ROOM}/availability",
            params={"check_in": "tomorrow", "check_out": "2024-01-01"},
        )

        assert response.status_code == HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["details"][0]["loc"] == ["query", "check_in"]

    def test_single_day(self, client: TestClient, seed_room: Callable) -> None:
        seed_room(2, 1)

        response = client.get(f"/api/rooms/{ROOM}/availability/2024-01-01")

        assert response.status_code == HTTP_200_OK
        assert response.json()["available_slots"] == 2

    def test_single_day_without_inventory_is_not_found(self, client: TestClient) -> None:
        response = client.get(f"/api/rooms/{ROOM}/availability/2024-01-01")

        assert response.status_code == HTTP_404_NOT_FOUND
        assert response.json()["error_code"] == "ERR_INV_002"


class TestInventoryRoutes:
    """Tests for the inventory management endpoints."""

    def test_seed_with_explicit_horizon(
        self, client: TestClient, vendor: dict[str, str]
    ) -> None:
        response = client.post(
            f"/api/rooms/{ROOM}/inventory",
            json={"capacity": 4, "horizon_days": 5, "from_date": "2024-01-01"},
            headers=vendor,
        )

        assert response.status_code == HTTP_201_CREATED
        assert response.json() == {
            "room_id": ROOM,
            "created_days": 5,
            "first_date": "2024-01-01",
            "last_date": "2024-01-05",
        }

    def test_seed_without_horizon_uses_room_created_default(
        self, client: TestClient, vendor: dict[str, str]
    ) -> None:
        response = client.post(
            f"/api/rooms/{ROOM}/inventory",
            json={"capacity": 2, "from_date": "2024-01-01"},
            headers=vendor,
        )

        assert response.status_code == HTTP_201_CREATED
        assert response.json()["created_days"] == 30

    def test_seed_defaults_to_today(self, client: TestClient, vendor: dict[str, str]) -> None:
        response = client.post(
            f"/api/rooms/{ROOM}/inventory",
            json={"capacity": 2, "horizon_days": 1},
            headers=vendor,
        )

        assert response.status_code == HTTP_201_CREATED
        assert response.json()["first_date"] == dt.date.today().isoformat()

    def test_reseed_conflicts(
        self, client: TestClient, vendor: dict[str, str], seed_room: Callable
    ) -> None:
        seed_room(2, 3)

        response = client.post(
            f"/api/rooms/{ROOM}/inventory",
            json={"capacity": 4, "horizon_days": 5, "from_date": "2024-01-01"},
            headers=vendor,
        )

        assert response.status_code == HTTP_409_CONFLICT
        assert response.json()["error_code"] == "ERR_INV_003"

    def test_zero_capacity_room_is_bad_request(
        self, client: TestClient, vendor: dict[str, str]
    ) -> None:
        response = client.post(
            f"/api/rooms/{ROOM}/inventory", json={"capacity": 0}, headers=vendor
        )
        assert response.status_code == HTTP_400_BAD_REQUEST

    @pytest.mark.parametrize(
        "body",
        [
            {"capacity": 2, "horizon_days": 367},
            {"capacity": 2, "horizon_days": 0},
            {"capacity": -1, "horizon_days": 5},
            {"capacity": 1001, "horizon_days": 5},
        ],
    )
    def test_seed_out_of_bounds_is_request_shape_error(
        self, client: TestClient, vendor: dict[str, str], body: dict
    ) -> None:
        response = client.post(f"/api/rooms/{ROOM}/inventory", json=body, headers=vendor)

        assert response.status_code == HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["success"] is False

    def test_extend_beyond_a_year_is_request_shape_error(
        self, client: TestClient, vendor: dict[str, str], seed_room: Callable
    ) -> None:
        seed_room(2, 3)
        horizon_end = dt.date.today() + dt.timedelta(days=400)

        response = client.post(
            f"/api/rooms/{ROOM}/inventory/extend",
            json={"total_slots": 2, "horizon_end": horizon_end.isoformat()},
            headers=vendor,
        )

        assert response.status_code == HTTP_422_UNPROCESSABLE_ENTITY

    def test_extend_horizon(
        self, client: TestClient, vendor: dict[str, str], seed_room: Callable
    ) -> None:
        seed_room(2, 3)

        response = client.post(
            f"/api/rooms/{ROOM}/inventory/extend",
            json={"total_slots": 2, "horizon_end": "2024-01-05"},
            headers=vendor,
        )

        assert response.status_code == HTTP_200_OK
        assert response.json()["created_days"] == 2
        assert response.json()["first_date"] == "2024-01-04"

    def test_capacity_change_not_implemented(
        self, client: TestClient, vendor: dict[str, str]
    ) -> None:
        response = client.put(
            f"/api/rooms/{ROOM}/inventory/capacity", json={"capacity": 8}, headers=vendor
        )

        assert response.status_code == HTTP_501_NOT_IMPLEMENTED
        assert response.json()["error_code"] == "ERR_INV_007"


class TestReservationRoutes:
    """Tests for the reservation endpoints."""

    def test_reserve_and_release(
        self, client: TestClient, student: dict[str, str], seed_room: Callable
    ) -> None:
        seed_room(2, 2)

        reserved = client.post(
            f"/api/rooms/{ROOM}/reservations",
            json=reservation_body("2024-01-01", "2024-01-03", 1, idempotency_key="stay-1"),
            headers=student,
        )
        assert reserved.status_code == HTTP_201_CREATED
        assert reserved.json()["reservation_id"] == "stay-1"
        assert reserved.json()["dates"] == ["2024-01-01", "2024-01-02"]

        day = client.get(f"/api/rooms/{ROOM}/availability/2024-01-02").json()
        assert day["available_slots"] == 1

        released = client.post(
            f"/api/rooms/{ROOM}/releases",
            json=reservation_body("2024-01-01", "2024-01-03", 1),
            headers=student,
        )
        assert released.status_code == HTTP_200_OK

        day = client.get(f"/api/rooms/{ROOM}/availability/2024-01-02").json()
        assert day["available_slots"] == 2

    def test_insufficient_availability_is_conflict(
        self, client: TestClient, student: dict[str, str], seed_room: Callable
    ) -> None:
        seed_room(1, 2)

        response = client.post(
            f"/api/rooms/{ROOM}/reservations",
            json=reservation_body("2024-01-01", "2024-01-03", 2),
            headers=student,
        )

        assert response.status_code == HTTP_409_CONFLICT
        data = response.json()
        assert data["error_code"] == "ERR_INV_005"
        assert data["details"]["date"] == "2024-01-01"

    def test_zero_quantity_is_bad_request(
        self, client: TestClient, student: dict[str, str], seed_room: Callable
    ) -> None:
        seed_room(1, 1)

        response = client.post(
            f"/api/rooms/{ROOM}/reservations",
            json=reservation_body("2024-01-01", "2024-01-02", 0),
            headers=student,
        )

        assert response.status_code == HTTP_400_BAD_REQUEST
        assert response.json()["error_code"] == "ERR_INV_001"

    def test_release_overflow_is_internal_error(
        self, client: TestClient, student: dict[str, str], seed_room: Callable
    ) -> None:
        seed_room(1, 1)

        response = client.post(
            f"/api/rooms/{ROOM}/releases",
            json=reservation_body("2024-01-01", "2024-01-02", 1),
            headers=student,
        )

        assert response.status_code == HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["error_code"] == "ERR_INV_006"

    def test_missing_field_is_request_shape_error(
        self, client: TestClient, student: dict[str, str]
    ) -> None:
        response = client.post(
            f"/api/rooms/{ROOM}/reservations",
            json={"check_in": "2024-01-01", "check_out": "2024-01-02"},
            headers=student,
        )

        assert response.status_code == HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["success"] is False

    def test_reserve_retry_with_same_key_replays_confirmation(
        self, client: TestClient, student: dict[str, str], seed_room: Callable
    ) -> None:
        seed_room(1, 1)
        body = reservation_body("2024-01-01", "2024-01-02", 1, idempotency_key="stay-9")

        first = client.post(f"/api/rooms/{ROOM}/reservations", json=body, headers=student)
        retry = client.post(f"/api/rooms/{ROOM}/reservations", json=body, headers=student)

        assert first.status_code == HTTP_201_CREATED
        assert retry.status_code == HTTP_201_CREATED
        assert retry.json() == first.json()
        day = client.get(f"/api/rooms/{ROOM}/availability/2024-01-01").json()
        assert day["available_slots"] == 0
