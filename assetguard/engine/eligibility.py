"""
Eligibility validation for one employee/asset pairing.

Starts from the availability verdict and layers employee policy on top:
assignment caps, department and role allowlists, asset restrictions and
ecosystem compatibility. Pure function of its inputs.
"""

from typing import Iterable, List, Optional

from assetguard.config.policy import DEFAULT_POLICY, PolicyConfig
from assetguard.engine.availability import resolve_availability
from assetguard.models.entities import AssetCategory, Employee, Snapshot, coerce_enum
from assetguard.models.findings import (
    AvailabilityInfo,
    IssueType,
    RestrictionSeverity,
    ValidationIssue,
    ValidationResult,
)


def _held_tags(employee: Employee, snapshot: Snapshot) -> set:
    tags = set()
    for assignment in snapshot.active_assignments_for_employee(employee.id):
        asset = snapshot.asset(assignment.asset_id, assignment.category)
        if asset is not None:
            tags |= asset.compatibility_tags
    return tags


def compatibility_warnings(
    candidate_tags: Iterable[str],
    held_tags: Iterable[str],
    incompatible_pairs,
) -> List[ValidationIssue]:
    """Flag every incompatible tag pair split between the candidate asset and held assets."""
    candidate_tags = set(candidate_tags)
    held_tags = set(held_tags)
    warnings = []
    for left, right in incompatible_pairs:
        for mine, theirs in ((left, right), (right, left)):
            if mine in candidate_tags and theirs in held_tags:
                warnings.append(ValidationIssue(
                    type=IssueType.COMPATIBILITY,
                    severity=RestrictionSeverity.WARNING,
                    message=f"Assigning a {mine} asset to an employee who already holds {theirs} assets.",
                    solution="Confirm the employee needs both platforms.",
                    can_override=True,
                ))
    return warnings


def _availability_issue(info: AvailabilityInfo) -> ValidationIssue:
    if info.next_available is not None:
        solution = f"Expected return: {info.next_available.isoformat()}"
    else:
        solution = "Choose another asset or review the current assignment."
    return ValidationIssue(
        type=IssueType.AVAILABILITY,
        severity=RestrictionSeverity.ERROR,
        message=info.reason or "Asset is not available.",
        solution=solution,
    )


def validate_eligibility(
    employee: Employee,
    asset_id: str,
    category: AssetCategory,
    snapshot: Snapshot,
    policy: Optional[PolicyConfig] = None,
) -> ValidationResult:
    policy = policy or DEFAULT_POLICY
    category = coerce_enum(AssetCategory, category, "category")
    info = resolve_availability(asset_id, category, snapshot, policy)
    limits = policy.limits_for(category)

    issues: List[ValidationIssue] = []
    warnings: List[ValidationIssue] = []
    recommendations: List[str] = []

    if not info.is_available:
        issues.append(_availability_issue(info))

    held = snapshot.active_assignments_for_employee(employee.id)
    if len(held) >= policy.max_assignments_per_employee:
        issues.append(ValidationIssue(
            type=IssueType.LIMIT,
            severity=RestrictionSeverity.ERROR,
            message=f"Employees may hold at most {policy.max_assignments_per_employee} assets.",
            solution="Return an existing assignment before requesting a new one.",
        ))

    same_category = sum(1 for a in held if a.category == category)
    if same_category >= limits.max_same_category:
        warnings.append(ValidationIssue(
            type=IssueType.LIMIT,
            severity=RestrictionSeverity.WARNING,
            message=f"Employee already holds {same_category} {category.value} assets.",
            solution="Review existing assignments if needed.",
            can_override=True,
        ))

    if limits.department_allowlist and employee.department not in limits.department_allowlist:
        issues.append(ValidationIssue(
            type=IssueType.POLICY,
            severity=RestrictionSeverity.ERROR,
            message=f"Department {employee.department} may not receive {category.value} assets.",
            solution="Check the asset policy or contact an administrator.",
        ))

    if limits.role_allowlist and employee.role not in limits.role_allowlist:
        issues.append(ValidationIssue(
            type=IssueType.POLICY,
            severity=RestrictionSeverity.ERROR,
            message=f"Role {employee.role or 'unassigned'} may not receive {category.value} assets.",
            solution="Check the asset policy or contact an administrator.",
        ))

    for restriction in info.restrictions:
        issue = ValidationIssue(
            type=IssueType.POLICY,
            severity=restriction.severity,
            message=restriction.message,
            can_override=restriction.can_override,
        )
        if restriction.severity == RestrictionSeverity.ERROR:
            issues.append(issue)
        else:
            warnings.append(issue)

    if info.utilization is not None and info.utilization > policy.utilization_advisory_percent:
        warnings.append(ValidationIssue(
            type=IssueType.LIMIT,
            severity=RestrictionSeverity.WARNING,
            message=f"License utilization is {round(info.utilization)}%.",
            solution="Consider purchasing additional licenses.",
        ))

    asset = snapshot.asset(asset_id, category)
    if asset is not None:
        warnings.extend(compatibility_warnings(
            asset.compatibility_tags, _held_tags(employee, snapshot), policy.incompatible_tags,
        ))

    if not issues and not warnings:
        recommendations.append("No problems found with this assignment.")
    if info.capacity and info.current_users is not None and info.current_users < info.capacity * 0.5:
        recommendations.append("License headroom is ample.")

    can_proceed = not issues
    requires_approval = any(not w.can_override for w in warnings)
    return ValidationResult(
        employee_id=employee.id,
        availability=info,
        issues=issues,
        warnings=warnings,
        recommendations=recommendations,
        can_proceed=can_proceed,
        requires_approval=requires_approval,
        approval_reason="A policy exception approval is required." if requires_approval else None,
    )
