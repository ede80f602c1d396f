from datetime import date, datetime, timezone

import pytest

from assetguard.config.policy import PolicyConfig
from assetguard.models.entities import (
    AssetCategory,
    Assignment,
    CandidateAssignment,
    Employee,
    EmployeeStatus,
    HardwareAsset,
    HardwareStatus,
    Snapshot,
    SoftwareAsset,
)


TODAY = date(2024, 3, 1)
NOW = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def today():
    """Fixed as-of date for date-relative rules."""
    return TODAY


@pytest.fixture
def now():
    """Fixed detection timestamp."""
    return NOW


@pytest.fixture
def policy():
    """Default assignment policy."""
    return PolicyConfig()


@pytest.fixture
def employees():
    return (
        Employee(id="E1", name="Alice", department="Engineering", role="developer"),
        Employee(id="E2", name="Bob", department="Engineering", role="developer"),
        Employee(id="E3", name="Carol", department="Finance", status=EmployeeStatus.INACTIVE),
    )


@pytest.fixture
def hardware():
    return (
        HardwareAsset(id="HW001", name="ThinkPad X1", manufacturer="Lenovo", model="X1",
                      status=HardwareStatus.ASSIGNED, compatibility_tags=frozenset({"windows"})),
        HardwareAsset(id="HW002", name="ThinkPad X1", manufacturer="Lenovo", model="X1",
                      compatibility_tags=frozenset({"windows"})),
        HardwareAsset(id="HW003", name="MacBook Pro", manufacturer="Apple", model="MBP14",
                      compatibility_tags=frozenset({"macos"})),
        HardwareAsset(id="HW004", name="Dell Latitude", manufacturer="Dell", model="5440",
                      status=HardwareStatus.MAINTENANCE),
        HardwareAsset(id="HW005", name="Old Desktop", manufacturer="HP", model="800",
                      status=HardwareStatus.DISPOSED),
    )


@pytest.fixture
def software():
    return (
        SoftwareAsset(id="SW001", name="IDE Pro", vendor="JetBrains", license_capacity=2,
                      expiry_date=date(2025, 12, 31)),
        SoftwareAsset(id="SW002", name="Office", vendor="Microsoft", license_capacity=10,
                      expiry_date=date(2024, 3, 15)),
        SoftwareAsset(id="SW003", name="Diagram Tool", vendor="Lucid"),
    )


@pytest.fixture
def assignments():
    return (
        Assignment(id="A1", employee_id="E1", asset_id="HW001", category=AssetCategory.HARDWARE,
                   assigned_date=date(2024, 1, 15), expected_return_date=date(2024, 4, 1)),
        Assignment(id="A2", employee_id="E1", asset_id="SW001", category=AssetCategory.SOFTWARE,
                   assigned_date=date(2024, 1, 15)),
    )


@pytest.fixture
def snapshot(employees, hardware, software, assignments):
    """Small inventory: HW001 held by E1, one of two SW001 seats taken."""
    return Snapshot(employees=employees, hardware=hardware, software=software, assignments=assignments)


@pytest.fixture
def hardware_candidate():
    """E2 requests the laptop E1 currently holds."""
    return CandidateAssignment(
        employee_id="E2",
        asset_id="HW001",
        category=AssetCategory.HARDWARE,
        assigned_date=date(2024, 3, 1),
    )


@pytest.fixture
def snapshot_payload():
    """JSON form of the snapshot fixture for API tests."""
    return {
        "employees": [
            {"id": "E1", "name": "Alice", "department": "Engineering", "role": "developer"},
            {"id": "E2", "name": "Bob", "department": "Engineering", "role": "developer"},
            {"id": "E3", "name": "Carol", "department": "Finance", "status": "inactive"},
        ],
        "hardware": [
            {"id": "HW001", "name": "ThinkPad X1", "manufacturer": "Lenovo", "model": "X1",
             "status": "assigned", "compatibility_tags": ["windows"]},
            {"id": "HW002", "name": "ThinkPad X1", "manufacturer": "Lenovo", "model": "X1",
             "compatibility_tags": ["windows"]},
        ],
        "software": [
            {"id": "SW001", "name": "IDE Pro", "license_capacity": 2, "expiry_date": "2025-12-31"},
        ],
        "assignments": [
            {"id": "A1", "employee_id": "E1", "asset_id": "HW001", "category": "hardware",
             "assigned_date": "2024-01-15", "expected_return_date": "2024-04-01"},
        ],
    }
