import pytest
import redis
from datetime import date

from assetguard.config.policy import PolicyConfig
from assetguard.config.settings import Settings
from assetguard.exceptions import ContractViolation
from assetguard.graph.assignment_graph import build_assignment_graph
from assetguard.models.entities import (
    AssetCategory,
    Assignment,
    CandidateAssignment,
    Employee,
    HardwareAsset,
    SoftwareAsset,
)
from assetguard.models.findings import CAUSE_DIMENSIONS, ConflictCause, Severity
from assetguard.engine.detector import detect_conflicts
from assetguard.storage.cache import ReportCache
from assetguard.utils.dates import months_before, years_after
from assetguard.utils.scoring import rank_conflicts, score_report


class TestContractViolations:
    """Malformed enum values and inverted dates are rejected at construction."""

    def test_is_a_value_error(self):
        assert issubclass(ContractViolation, ValueError)

    def test_bad_employee_status(self):
        with pytest.raises(ContractViolation, match="employee.status"):
            Employee(id="E1", name="Alice", department="IT", status="retired")

    def test_bad_hardware_status(self):
        with pytest.raises(ContractViolation):
            HardwareAsset(id="HW1", name="Laptop", status="lent")

    def test_negative_license_capacity(self):
        with pytest.raises(ContractViolation):
            SoftwareAsset(id="SW1", name="IDE", license_capacity=-1)

    def test_return_before_assignment(self):
        with pytest.raises(ContractViolation):
            Assignment(id="A1", employee_id="E1", asset_id="HW1", category=AssetCategory.HARDWARE,
                       assigned_date=date(2024, 3, 1), expected_return_date=date(2024, 2, 1))

    def test_bad_candidate_category(self):
        with pytest.raises(ContractViolation):
            CandidateAssignment("E1", "HW1", "furniture", date(2024, 3, 1))

    def test_string_values_are_coerced(self):
        a = Assignment(id="A1", employee_id="E1", asset_id="HW1", category="hardware",
                       assigned_date=date(2024, 3, 1), status="returned", return_date=date(2024, 3, 1))
        assert a.category == AssetCategory.HARDWARE
        assert not a.is_active


class TestCauseDimensions:
    def test_every_cause_has_a_dimension(self):
        assert set(CAUSE_DIMENSIONS) == set(ConflictCause)


class TestScoring:
    """Severity ranking of detected conflicts."""

    def test_rank_and_score(self, snapshot, today):
        candidate = CandidateAssignment("E9", "HW001", AssetCategory.HARDWARE, date(2025, 6, 1))
        conflicts = detect_conflicts(candidate, snapshot, today=today).conflicts
        ranked = rank_conflicts(conflicts)
        severities = [c.severity for c in ranked]
        assert severities == sorted(severities, key=lambda s: -s.rank)
        assert severities[-1] == Severity.MEDIUM
        # critical resource + critical unknown + critical missing + medium future date
        assert score_report(conflicts) == pytest.approx(8 * 3 + 2)

    def test_empty(self):
        assert rank_conflicts([]) == []
        assert score_report([]) == 0


class TestAssignmentGraph:
    def test_edges_join_shared_employee_or_asset(self, assignments):
        extra = Assignment(id="A3", employee_id="E2", asset_id="HW001",
                           category=AssetCategory.HARDWARE, assigned_date=date(2023, 1, 1))
        graph = build_assignment_graph(list(assignments) + [extra])
        assert graph["A1"] == {"A2", "A3"}
        assert graph["A2"] == {"A1"}
        assert graph["A3"] == {"A1"}

    def test_isolated_assignment(self):
        a = Assignment(id="A1", employee_id="E1", asset_id="HW1",
                       category=AssetCategory.HARDWARE, assigned_date=date(2024, 1, 1))
        assert build_assignment_graph([a]) == {"A1": set()}

    def test_same_id_in_other_category_is_not_shared(self):
        hw = Assignment(id="A1", employee_id="E1", asset_id="X1",
                        category=AssetCategory.HARDWARE, assigned_date=date(2024, 1, 1))
        sw = Assignment(id="A2", employee_id="E2", asset_id="X1",
                        category=AssetCategory.SOFTWARE, assigned_date=date(2024, 1, 1))
        assert build_assignment_graph([hw, sw]) == {"A1": set(), "A2": set()}


class TestDates:
    def test_calendar_offsets(self):
        assert months_before(date(2024, 3, 31), 1) == date(2024, 2, 29)
        assert years_after(date(2024, 2, 29), 1) == date(2025, 2, 28)


class TestPolicyConfig:
    def test_from_settings(self):
        settings = Settings(max_assignments_per_employee=7, hardware_department_allowlist=["IT"])
        policy = PolicyConfig.from_settings(settings)
        assert policy.max_assignments_per_employee == 7
        assert policy.limits_for(AssetCategory.HARDWARE).department_allowlist == frozenset({"IT"})
        assert policy.limits_for(AssetCategory.SOFTWARE).max_same_category == 5
        assert policy.incompatible_tags == (("macos", "windows"),)


class FailingRedis:
    def get(self, key):
        raise redis.ConnectionError("down")

    def setex(self, key, ttl, value):
        raise redis.ConnectionError("down")

    def ping(self):
        raise redis.ConnectionError("down")


class TestReportCache:
    """Redis-backed report cache degrades to misses."""

    def test_errors_are_misses(self):
        cache = ReportCache(redis_url="redis://localhost:6379/0", ttl_seconds=10)
        cache.redis_client = FailingRedis()
        assert cache.get("abc") is None
        cache.set("abc", {"has_conflicts": False})
        assert not cache.health_check()

    def test_hash_depends_on_as_of(self):
        payload = {"candidate": {"employee_id": "E1"}}
        first = ReportCache.hash_request(payload, "2024-03-01")
        assert first == ReportCache.hash_request(dict(payload), "2024-03-01")
        assert first != ReportCache.hash_request(payload, "2024-03-02")
        assert len(first) == 16
