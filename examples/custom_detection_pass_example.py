"""
Example: Extending AssetGuard with a custom detection pass

This example shows how to add an organisation-specific rule to conflict
detection and run it alongside the standard passes.
"""

from datetime import date

from assetguard.engine.detector import (
    ConflictDetector,
    DetectionPass,
    detect_conflicts,
    make_conflict,
)
from assetguard.models.entities import (
    AssetCategory,
    Assignment,
    CandidateAssignment,
    Employee,
    HardwareAsset,
    Snapshot,
)
from assetguard.models.findings import ConflictCause, Severity


# 1. Define a custom detection pass
class InternQuotaPass(DetectionPass):
    """
    Interns may hold at most two assets at a time.
    The standard policy pass still enforces the organisation-wide cap.
    """

    name = "intern_quota"

    def __init__(self, quota: int = 2):
        self.quota = quota

    def detect(self, candidate, snapshot, context):
        employee = snapshot.employee(candidate.employee_id)
        if employee is None or employee.role != "intern":
            return []
        held = snapshot.active_assignments_for_employee(employee.id)
        if len(held) < self.quota or len(held) >= context.policy.max_assignments_per_employee:
            return []
        return [make_conflict(
            ConflictCause.ASSIGNMENT_CAP_REACHED,
            Severity.MEDIUM,
            "Intern quota reached",
            f"{employee.name} already holds {len(held)} assets; interns are limited to {self.quota}.",
            "Additional equipment for interns needs a manager's sign-off.",
            candidate, context, related=held, include_related_employees=False,
        )]


# 2. Register it on a detector next to the standard passes
detector = ConflictDetector()
detector.register(InternQuotaPass(quota=2))


# 3. Run detection with the extended detector
if __name__ == "__main__":
    snapshot = Snapshot(
        employees=(Employee("E9", "Sam", "Engineering", role="intern"),),
        hardware=(
            HardwareAsset("HW1", "Laptop"),
            HardwareAsset("HW2", "Monitor"),
            HardwareAsset("HW3", "Dock"),
        ),
        assignments=(
            Assignment("A1", "E9", "HW1", AssetCategory.HARDWARE, date(2024, 1, 10)),
            Assignment("A2", "E9", "HW2", AssetCategory.HARDWARE, date(2024, 1, 10)),
        ),
    )
    candidate = CandidateAssignment("E9", "HW3", AssetCategory.HARDWARE, date(2024, 2, 1))

    report = detect_conflicts(candidate, snapshot, today=date(2024, 1, 15), detector=detector)
    for conflict in report.conflicts:
        print(f"[{conflict.severity.value}] {conflict.title}: {conflict.description}")
    for proposal in report.proposals:
        print(f"  -> {proposal.strategy.value}: {proposal.title}")
