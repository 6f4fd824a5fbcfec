# backend/tests/routes/test_schedule_routes.py

from unittest.mock import Mock

from fastapi.testclient import TestClient
import pytest

from rehome_ops.core.exceptions import StoreUnavailableException
from rehome_ops.main import app
from rehome_ops.routes.v1.schedule import get_availability_service, get_schedule_editor_service
from rehome_ops.services.availability_service import AvailabilityService

BASE = "/api/v1/schedule"


@pytest.fixture
def client(availability_service, editor):
    """Test client wired to services sharing the in-memory store."""
    app.dependency_overrides[get_availability_service] = lambda: availability_service
    app.dependency_overrides[get_schedule_editor_service] = lambda: editor
    client = TestClient(app)
    yield client
    # Clean up
    app.dependency_overrides.clear()


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_metrics_exposes_service_operations(self, client):
        client.get(f"{BASE}/blocked", params={"date": "2025-06-10"})
        response = client.get("/metrics")
        assert response.status_code == 200
        assert "rehome_service_operations_total" in response.text


class TestBlockAndAvailabilityEndpoints:
    def test_date_block_flow(self, client):
        created = client.post(
            f"{BASE}/date-blocks",
            json={"date": "2025-06-10", "all_cities": True, "reason": "Holiday"},
        )
        assert created.status_code == 201
        body = created.json()
        assert body["cities"] == []
        assert body["all_cities"] is True

        blocked = client.get(f"{BASE}/blocked", params={"date": "2025-06-10", "city": "Amsterdam"})
        assert blocked.status_code == 200
        assert blocked.json()["is_blocked"] is True

        calendar = client.get(f"{BASE}/calendar/2025/6").json()
        assert len(calendar["days"]) == 30
        assert calendar["days"][9]["is_fully_blocked"] is True

        deleted = client.delete(f"{BASE}/date-blocks/{body['id']}")
        assert deleted.status_code == 204
        blocked = client.get(f"{BASE}/blocked", params={"date": "2025-06-10"})
        assert blocked.json()["is_blocked"] is False

    def test_block_without_city_scope_is_rejected(self, client):
        response = client.post(f"{BASE}/date-blocks", json={"date": "2025-06-10"})
        assert response.status_code == 422

    def test_time_slot_flow(self, client):
        created = client.post(
            f"{BASE}/time-slot-blocks",
            json={
                "date": "2025-06-10",
                "start_time": "09:00",
                "end_time": "12:00",
                "cities": ["Utrecht"],
            },
        )
        assert created.status_code == 201

        params = {"date": "2025-06-10", "start": "11:00", "end": "13:00", "city": "Utrecht"}
        assert client.get(f"{BASE}/time-slot-blocked", params=params).json()["is_blocked"] is True
        params["start"] = "12:00"
        assert client.get(f"{BASE}/time-slot-blocked", params=params).json()["is_blocked"] is False

    def test_inverted_interval_is_bad_request(self, client):
        response = client.get(
            f"{BASE}/time-slot-blocked",
            params={"date": "2025-06-10", "start": "13:00", "end": "12:00"},
        )
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_INTERVAL"

    def test_invalid_month(self, client):
        response = client.get(f"{BASE}/calendar/2025/13")
        assert response.status_code == 400

    def test_unknown_block_is_not_found(self, client):
        response = client.patch(
            f"{BASE}/date-blocks/01HF4G12ABCDEF3456789XYZAB", json={"reason": "x"}
        )
        assert response.status_code == 404

    def test_validate_booking_date(self, client):
        client.post(
            f"{BASE}/date-blocks",
            json={"date": "2025-06-10", "cities": ["Amsterdam"], "reason": "Event"},
        )
        response = client.post(
            f"{BASE}/validate-booking-date",
            json={"start_date": "2025-06-10", "city": "Amsterdam"},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["is_valid"] is False
        assert body["blocked_date"] == "2025-06-10"

    def test_last_representable_date_is_answered(self, client):
        blocked = client.get(
            f"{BASE}/blocked-dates",
            params={"start_date": "9999-12-30", "end_date": "9999-12-31"},
        )
        assert blocked.status_code == 200
        assert blocked.json() == []

        gate = client.post(f"{BASE}/validate-booking-date", json={"start_date": "9999-12-31"})
        assert gate.status_code == 200
        assert gate.json()["is_valid"] is True

    def test_blocked_dates_range_beyond_horizon_is_bad_request(self, client):
        response = client.get(
            f"{BASE}/blocked-dates",
            params={"start_date": "0001-01-01", "end_date": "9999-12-31"},
        )
        assert response.status_code == 400
        assert response.json()["code"] == "RANGE_BEYOND_HORIZON"


class TestAssignmentEndpoints:
    def test_put_assignments_and_month_schedule(self, client):
        response = client.put(
            f"{BASE}/assignments/2025-06-10", json={"cities": ["Amsterdam", "Utrecht"]}
        )
        assert response.status_code == 200
        assert response.json()["added"] == ["Amsterdam", "Utrecht"]

        response = client.put(
            f"{BASE}/assignments/2025-06-10",
            json={"cities": ["Utrecht"], "expected_current": ["Amsterdam"]},
        )
        assert response.status_code == 409
        assert response.json()["code"] == "CONCURRENT_MODIFICATION"

        schedule = client.get(f"{BASE}/month-schedule/2025/6").json()
        assert schedule["days"][0]["assigned_cities"] == ["Amsterdam", "Utrecht"]

        status = client.get(f"{BASE}/city-status", params={"city": "Utrecht", "date": "2025-06-10"})
        assert status.json() == {"is_scheduled": True, "is_empty": False}

    def test_bulk_assign(self, client):
        payload = {"start_date": "2025-06-01", "end_date": "2025-06-03", "cities": ["Amsterdam", "Utrecht"]}
        first = client.post(f"{BASE}/assignments/bulk", json=payload).json()
        assert first["assignments_written"] == 6
        assert len(first["succeeded_dates"]) == 3

        second = client.post(f"{BASE}/assignments/bulk", json=payload).json()
        assert second["assignments_written"] == 0

    def test_bulk_assign_across_years_rejected(self, client):
        payload = {"start_date": "2025-12-30", "end_date": "2026-01-02", "cities": ["Amsterdam"]}
        response = client.post(f"{BASE}/assignments/bulk", json=payload)
        assert response.status_code == 400

    def test_bulk_assign_on_last_representable_date(self, client):
        payload = {"start_date": "9999-12-31", "end_date": "9999-12-31", "cities": ["Utrecht"]}
        response = client.post(f"{BASE}/assignments/bulk", json=payload)
        assert response.status_code == 200
        assert response.json()["succeeded_dates"] == ["9999-12-31"]

    def test_batch_status(self, client):
        client.put(f"{BASE}/assignments/2025-06-10", json={"cities": ["Delft"]})
        response = client.post(
            f"{BASE}/city-status/batch",
            json={"lookups": [{"city": "Delft", "date": "2025-06-10"}]},
        )
        assert response.json()["results"]["Delft:2025-06-10"]["is_scheduled"] is True


class TestStoreOutage:
    def test_calendar_returns_503(self):
        service = Mock(spec=AvailabilityService)
        service.get_calendar_month.side_effect = StoreUnavailableException(
            "list_date_blocks", target="2025-06-01..2025-06-30"
        )
        app.dependency_overrides[get_availability_service] = lambda: service
        try:
            response = TestClient(app).get(f"{BASE}/calendar/2025/6")
        finally:
            app.dependency_overrides.clear()
        assert response.status_code == 503
        assert response.json()["code"] == "STORE_UNAVAILABLE"

    def test_blocked_check_returns_503_via_app_handler(self):
        service = Mock(spec=AvailabilityService)
        service.is_date_blocked.side_effect = StoreUnavailableException("list_date_blocks")
        app.dependency_overrides[get_availability_service] = lambda: service
        try:
            response = TestClient(app).get(f"{BASE}/blocked", params={"date": "2025-06-10"})
        finally:
            app.dependency_overrides.clear()
        assert response.status_code == 503
