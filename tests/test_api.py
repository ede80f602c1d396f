import pytest
from fastapi.testclient import TestClient

from assetguard.main import app
from assetguard.storage.cache import get_report_cache


client = TestClient(app)


class InMemoryCache:
    def __init__(self):
        self.store = {}

    def get(self, request_hash):
        return self.store.get(request_hash)

    def set(self, request_hash, report):
        self.store[request_hash] = report

    def health_check(self):
        return True


@pytest.fixture(autouse=True)
def report_cache():
    """Swap the redis cache for an in-memory one."""
    cache = InMemoryCache()
    app.dependency_overrides[get_report_cache] = lambda: cache
    yield cache
    app.dependency_overrides.clear()


def _candidate(employee_id="E2", asset_id="HW001", category="hardware", **kwargs):
    return {"employee_id": employee_id, "asset_id": asset_id, "category": category,
            "assigned_date": "2024-03-01", **kwargs}


class TestHealth:
    def test_health(self):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert response.json()["cache"] == "ok"

    def test_health_with_cache_disabled(self):
        app.dependency_overrides[get_report_cache] = lambda: None
        assert client.get("/health").json()["cache"] == "disabled"


class TestDetectEndpoint:
    """Integration tests for /conflicts/detect."""

    def test_detect_double_booking(self, snapshot_payload):
        payload = {"candidate": _candidate(), "snapshot": snapshot_payload, "as_of": "2024-03-01"}
        response = client.post("/api/v1/conflicts/detect", json=payload)

        assert response.status_code == 200
        data = response.json()
        assert data["has_conflicts"]
        assert len(data["conflicts"]) == 1
        assert data["conflicts"][0]["dimension"] == "resource"
        assert data["conflicts"][0]["severity"] == "critical"
        assert data["highest_severity"] == "critical"
        assert data["risk_score"] == 8.0
        assert [p["strategy"] for p in data["proposals"]] == ["alternative_asset", "reschedule"]
        assert data["proposals"][0]["alternatives"][0]["strategy"] == "reschedule"
        assert data["cached"] is False

    def test_second_request_is_served_from_cache(self, snapshot_payload, report_cache):
        payload = {"candidate": _candidate(), "snapshot": snapshot_payload, "as_of": "2024-03-01"}
        client.post("/api/v1/conflicts/detect", json=payload)
        response = client.post("/api/v1/conflicts/detect", json=payload)

        assert response.status_code == 200
        assert response.json()["cached"] is True
        assert len(report_cache.store) == 1

    def test_clean_candidate(self, snapshot_payload):
        payload = {"candidate": _candidate(asset_id="HW002"), "snapshot": snapshot_payload, "as_of": "2024-03-01"}
        data = client.post("/api/v1/conflicts/detect", json=payload).json()
        assert not data["has_conflicts"]
        assert data["risk_score"] == 0
        assert data["highest_severity"] is None

    def test_invalid_category_is_rejected(self, snapshot_payload):
        payload = {"candidate": _candidate(category="furniture"), "snapshot": snapshot_payload}
        response = client.post("/api/v1/conflicts/detect", json=payload)
        assert response.status_code == 422

    def test_inverted_period_is_rejected(self, snapshot_payload):
        payload = {"candidate": _candidate(expected_return_date="2024-02-01"), "snapshot": snapshot_payload}
        response = client.post("/api/v1/conflicts/detect", json=payload)
        assert response.status_code == 422

    def test_contract_violation_maps_to_400(self, snapshot_payload):
        snapshot_payload["software"][0]["license_capacity"] = -1
        payload = {"candidate": _candidate(), "snapshot": snapshot_payload}
        response = client.post("/api/v1/conflicts/detect", json=payload)
        assert response.status_code == 400
        assert "license_capacity" in response.json()["detail"]


class TestResolveEndpoint:
    """Integration tests for /conflicts/resolve."""

    def _payload(self, snapshot_payload, conflict_id, strategy):
        return {
            "candidate": _candidate(),
            "snapshot": snapshot_payload,
            "conflict_id": conflict_id,
            "strategy": strategy,
            "as_of": "2024-03-01",
        }

    def test_alternative_asset(self, snapshot_payload):
        payload = self._payload(snapshot_payload, "hardware_double_booked:E2:HW001", "alternative_asset")
        response = client.post("/api/v1/conflicts/resolve", json=payload)
        assert response.status_code == 200
        data = response.json()
        assert data["success"]
        assert data["revised_candidate"]["asset_id"] == "HW002"

    def test_manual_proposal_is_declined(self, snapshot_payload):
        payload = self._payload(snapshot_payload, "hardware_double_booked:E2:HW001", "reschedule")
        data = client.post("/api/v1/conflicts/resolve", json=payload).json()
        assert not data["success"]
        assert data["message"] == "manual review required"
        assert [p["strategy"] for p in data["fallback_options"]] == ["alternative_asset"]

    def test_unknown_conflict(self, snapshot_payload):
        payload = self._payload(snapshot_payload, "asset_missing:E2:HW001", "manual_review")
        response = client.post("/api/v1/conflicts/resolve", json=payload)
        assert response.status_code == 404

    def test_strategy_not_proposed(self, snapshot_payload):
        payload = self._payload(snapshot_payload, "hardware_double_booked:E2:HW001", "policy_override")
        response = client.post("/api/v1/conflicts/resolve", json=payload)
        assert response.status_code == 404


class TestAvailabilityEndpoints:
    def test_resolve_held_hardware(self, snapshot_payload):
        payload = {"asset_id": "HW001", "category": "hardware", "snapshot": snapshot_payload}
        data = client.post("/api/v1/availability/resolve", json=payload).json()
        assert data["is_available"] is False
        assert data["status"] == "assigned"
        assert data["current_assignment"]["id"] == "A1"
        assert data["next_available"] == "2024-04-01"

    def test_unknown_asset(self, snapshot_payload):
        payload = {"asset_id": "HW999", "category": "hardware", "snapshot": snapshot_payload}
        data = client.post("/api/v1/availability/resolve", json=payload).json()
        assert data["status"] == "not_found"

    def test_probe(self, snapshot_payload):
        payload = {"asset_id": "HW001", "category": "hardware", "snapshot": snapshot_payload}
        data = client.post("/api/v1/availability/probe", json=payload).json()
        assert data["available"] is False
        assert data["next_check_at"] is not None

    def test_overlaps(self, snapshot_payload):
        payload = {"asset_id": "HW001", "proposed_date": "2024-03-15",
                   "assignments": snapshot_payload["assignments"]}
        data = client.post("/api/v1/conflicts/overlaps", json=payload).json()
        assert [a["id"] for a in data] == ["A1"]


class TestEligibilityEndpoint:
    def test_validate(self, snapshot_payload):
        payload = {"employee_id": "E2", "asset_id": "HW002", "category": "hardware", "snapshot": snapshot_payload}
        data = client.post("/api/v1/eligibility/validate", json=payload).json()
        assert data["can_proceed"] is True
        assert data["requires_approval"] is False

    def test_unknown_employee(self, snapshot_payload):
        payload = {"employee_id": "E9", "asset_id": "HW002", "category": "hardware", "snapshot": snapshot_payload}
        response = client.post("/api/v1/eligibility/validate", json=payload)
        assert response.status_code == 404


class TestEdgeCaseEndpoints:
    def test_single_scenario(self, snapshot_payload):
        response = client.post("/api/v1/edge-cases/inactive_employee",
                               json={"snapshot": snapshot_payload, "as_of": "2024-03-01"})
        assert response.status_code == 200
        assert response.json()["detected"] is False

    def test_all_scenarios(self, snapshot_payload):
        response = client.post("/api/v1/edge-cases", json={"snapshot": snapshot_payload, "as_of": "2024-03-01"})
        assert len(response.json()) == 6

    def test_unknown_scenario(self, snapshot_payload):
        response = client.post("/api/v1/edge-cases/flood", json={"snapshot": snapshot_payload})
        assert response.status_code == 422
