from datetime import date, timedelta
from typing import List

from assetguard.config.policy import PolicyConfig
from assetguard.models.entities import AssetCategory, CandidateAssignment, Snapshot
from assetguard.models.findings import AdvisoryWarning, WarningCategory
from assetguard.utils.dates import months_before

VOLUME_WINDOW = timedelta(days=7)


def performance_warnings(
    candidate: CandidateAssignment,
    snapshot: Snapshot,
    policy: PolicyConfig,
    today: date,
) -> List[AdvisoryWarning]:
    warnings = []

    window_start = today - VOLUME_WINDOW
    recent = sum(1 for a in snapshot.assignments if a.assigned_date >= window_start)
    if recent > policy.weekly_volume_threshold:
        warnings.append(AdvisoryWarning(
            id=f"high_volume:{today.isoformat()}",
            category=WarningCategory.PERFORMANCE,
            message="High assignment volume over the last seven days.",
            details=f"{recent} assignments were created since {window_start.isoformat()}.",
            recommendation="Review the assignment process for efficiency.",
        ))

    held = len(snapshot.active_assignments_for_employee(candidate.employee_id))
    cap = policy.max_assignments_per_employee
    if held >= cap - 1:
        warnings.append(AdvisoryWarning(
            id=f"approaching_cap:{candidate.employee_id}",
            category=WarningCategory.PERFORMANCE,
            message="Employee is approaching the assignment cap.",
            details=f"{held} active assignments, cap is {cap}.",
            recommendation="Review existing assignments before adding more.",
        ))
    return warnings


def compliance_warnings(
    candidate: CandidateAssignment,
    snapshot: Snapshot,
    today: date,
) -> List[AdvisoryWarning]:
    asset = snapshot.asset(candidate.asset_id, candidate.category)
    if asset is None:
        return []

    if candidate.category == AssetCategory.SOFTWARE:
        if asset.expiry_date is not None and today >= months_before(asset.expiry_date, 1):
            return [AdvisoryWarning(
                id=f"license_expiry:{asset.id}",
                category=WarningCategory.COMPLIANCE,
                message="Software license expires soon.",
                details=f"Expires on {asset.expiry_date.isoformat()}.",
                recommendation="Prepare the license renewal.",
            )]
        return []

    if asset.last_maintenance_date is not None and asset.last_maintenance_date < months_before(today, 6):
        return [AdvisoryWarning(
            id=f"maintenance_due:{asset.id}",
            category=WarningCategory.COMPLIANCE,
            message="Hardware may be due for maintenance.",
            details=f"Last maintained on {asset.last_maintenance_date.isoformat()}.",
            recommendation="Check the maintenance schedule.",
        )]
    return []


def generate_warnings(
    candidate: CandidateAssignment,
    snapshot: Snapshot,
    policy: PolicyConfig,
    today: date,
) -> List[AdvisoryWarning]:
    """Non-blocking advisories; they never change whether a candidate may proceed."""
    return performance_warnings(candidate, snapshot, policy, today) + compliance_warnings(
        candidate, snapshot, today
    )
