import asyncio
import pytest
from datetime import date, timedelta

from assetguard.config.policy import PolicyConfig
from assetguard.engine.edge_cases import PLAYBOOKS, assess_all_edge_cases, assess_edge_case
from assetguard.engine.probe import RealTimeProbe, SnapshotOracle, probe_real_time_availability
from assetguard.exceptions import ContractViolation
from assetguard.models.entities import (
    AssetCategory,
    Assignment,
    AssignmentStatus,
    Employee,
    HardwareAsset,
    Snapshot,
    SoftwareAsset,
)
from assetguard.models.findings import EdgeCaseScenario, ProbeResult


class StubOracle:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    async def check(self, asset_id, category):
        self.calls.append((asset_id, category))
        if self.error is not None:
            raise self.error
        return self.result


class TestRealTimeProbe:
    """Single-shot probe with injected oracle and clock."""

    def test_available(self, now):
        oracle = StubOracle(ProbeResult(available=True))
        result = asyncio.run(RealTimeProbe(oracle, clock=lambda: now).probe("HW1", AssetCategory.HARDWARE))
        assert result == ProbeResult(available=True)
        assert oracle.calls == [("HW1", AssetCategory.HARDWARE)]

    def test_unavailable_suggests_retry(self, now):
        oracle = StubOracle(ProbeResult(available=False, reason="in use"))
        result = asyncio.run(RealTimeProbe(oracle, clock=lambda: now).probe("HW1", AssetCategory.HARDWARE))
        assert not result.available
        assert result.reason == "in use"
        assert result.next_check_at == now + timedelta(seconds=60)

    def test_oracle_failure_is_reported_as_data(self, now):
        oracle = StubOracle(error=ConnectionError("directory unreachable"))
        result = asyncio.run(RealTimeProbe(oracle, clock=lambda: now).probe("HW1", AssetCategory.HARDWARE))
        assert not result.available
        assert result.reason == "availability check failed: directory unreachable"
        assert result.next_check_at == now + timedelta(seconds=60)

    def test_custom_retry_interval(self, now):
        oracle = StubOracle(ProbeResult(available=False))
        result = asyncio.run(probe_real_time_availability(
            "SW1", "software", oracle, clock=lambda: now, retry_after=timedelta(seconds=30),
        ))
        assert result.next_check_at == now + timedelta(seconds=30)
        assert oracle.calls == [("SW1", AssetCategory.SOFTWARE)]

    def test_snapshot_oracle(self, snapshot, now):
        probe = RealTimeProbe(SnapshotOracle(snapshot), clock=lambda: now)
        free = asyncio.run(probe.probe("HW002", AssetCategory.HARDWARE))
        held = asyncio.run(probe.probe("HW001", AssetCategory.HARDWARE))
        assert free.available
        assert not held.available
        assert "E1" in held.reason

    def test_bad_category(self):
        with pytest.raises(ContractViolation):
            asyncio.run(RealTimeProbe(StubOracle()).probe("HW1", "furniture"))


def _active(id, employee_id, asset_id, category=AssetCategory.HARDWARE, **kwargs):
    return Assignment(id=id, employee_id=employee_id, asset_id=asset_id, category=category,
                      assigned_date=date(2024, 1, 10), **kwargs)


class TestEdgeCases:
    """Whole-snapshot edge-case playbooks."""

    def test_every_scenario_has_a_playbook(self):
        assert set(PLAYBOOKS) == set(EdgeCaseScenario)
        for playbook, _ in PLAYBOOKS.values():
            assert playbook.resolution and playbook.preventive

    def test_clean_snapshot(self, snapshot, today):
        reports = assess_all_edge_cases(snapshot, today=today)
        assert [r.scenario for r in reports] == list(EdgeCaseScenario)
        assert not any(r.detected for r in reports)

    def test_expired_asset(self, today):
        snap = Snapshot(
            software=(SoftwareAsset(id="SW1", name="IDE", expiry_date=date(2024, 2, 1)),),
            assignments=(_active("A1", "E1", "SW1", AssetCategory.SOFTWARE),),
        )
        report = assess_edge_case(EdgeCaseScenario.EXPIRED_ASSET, snap, today=today)
        assert report.detected
        assert report.affected_assignment_ids == ("A1",)

    def test_inactive_employee(self, employees, hardware, today):
        snap = Snapshot(employees=employees, hardware=hardware,
                        assignments=(_active("A1", "E1", "HW002"), _active("A2", "E3", "HW003")))
        report = assess_edge_case("inactive_employee", snap, today=today)
        assert report.scenario == EdgeCaseScenario.INACTIVE_EMPLOYEE
        assert report.affected_assignment_ids == ("A2",)

    def test_maintenance_conflict(self, employees, hardware, today):
        snap = Snapshot(employees=employees, hardware=hardware, assignments=(_active("A1", "E2", "HW004"),))
        report = assess_edge_case(EdgeCaseScenario.MAINTENANCE_CONFLICT, snap, today=today)
        assert report.affected_assignment_ids == ("A1",)

    def test_license_expiry(self, software, today):
        snap = Snapshot(software=software, assignments=(
            _active("A1", "E1", "SW002", AssetCategory.SOFTWARE),
            _active("A2", "E2", "SW001", AssetCategory.SOFTWARE),
        ))
        report = assess_edge_case(EdgeCaseScenario.LICENSE_EXPIRY, snap, today=today)
        assert report.affected_assignment_ids == ("A1",)

    def test_bulk_return(self, today):
        returned = tuple(
            _active(f"A{i}", f"E{i}", f"HW{i}", status=AssignmentStatus.RETURNED,
                    return_date=today - timedelta(days=2))
            for i in range(3)
        )
        snap = Snapshot(assignments=returned)
        assert not assess_edge_case(EdgeCaseScenario.BULK_RETURN, snap, today=today).detected
        report = assess_edge_case(EdgeCaseScenario.BULK_RETURN, snap,
                                  policy=PolicyConfig(bulk_return_threshold=2), today=today)
        assert report.detected
        assert len(report.affected_assignment_ids) == 3

    def test_cascade_effect(self, today):
        snap = Snapshot(
            employees=(Employee(id="E1", name="Alice", department="IT"),),
            hardware=tuple(HardwareAsset(id=f"HW{i}", name="Laptop") for i in range(3)),
            assignments=tuple(_active(f"A{i}", "E1", f"HW{i}") for i in range(3)),
        )
        report = assess_edge_case(EdgeCaseScenario.CASCADE_EFFECT, snap,
                                  policy=PolicyConfig(cascade_threshold=2), today=today)
        assert report.affected_assignment_ids == ("A0", "A1", "A2")

    def test_unknown_scenario(self, snapshot):
        with pytest.raises(ContractViolation):
            assess_edge_case("flood", snapshot)
