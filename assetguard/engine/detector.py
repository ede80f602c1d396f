"""
Conflict Detection for Candidate Assignments

Evaluates one candidate assignment against a snapshot of employees, assets
and existing assignments. Detection is split into independent passes, one
per conflict dimension:

- Resource: hardware double booking, software license exhaustion
- Scheduling: duplicate holding, overlapping loan periods
- Policy: unknown or inactive employee, per-employee assignment cap
- Business rule: asset in maintenance or disposed, expired license
- Data integrity: dangling employee/asset ids, implausible future dates

Passes never see each other's output, so their order only affects the order
of the returned list. Registering passes in a fixed order keeps the result
order-stable; conflict ids are derived from cause and affected ids, so two
runs over identical input produce identical conflicts apart from
``detected_at``.

Custom passes can be plugged in by subclassing DetectionPass and registering
them on a ConflictDetector.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, List, Optional, Sequence

from assetguard.config.policy import DEFAULT_POLICY, PolicyConfig
from assetguard.engine.advisories import generate_warnings
from assetguard.engine.availability import license_capacity
from assetguard.engine.planner import plan_resolutions
from assetguard.models.entities import (
    AssetCategory,
    Assignment,
    CandidateAssignment,
    HardwareStatus,
    Snapshot,
)
from assetguard.models.findings import Conflict, ConflictCause, DetectionReport, Severity
from assetguard.utils.dates import intervals_overlap, utc_now, years_after

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DetectionContext:
    today: date
    detected_at: datetime
    policy: PolicyConfig = DEFAULT_POLICY


def _unique(ids: Iterable[str]) -> tuple:
    return tuple(dict.fromkeys(ids))


def make_conflict(
    cause: ConflictCause,
    severity: Severity,
    title: str,
    description: str,
    impact: str,
    candidate: CandidateAssignment,
    context: DetectionContext,
    related: Sequence[Assignment] = (),
    auto_resolvable: bool = False,
    include_related_employees: bool = True,
) -> Conflict:
    employees = [candidate.employee_id]
    if include_related_employees:
        employees.extend(a.employee_id for a in related)
    return Conflict(
        id=f"{cause.value}:{candidate.employee_id}:{candidate.asset_id}",
        cause=cause,
        severity=severity,
        title=title,
        description=description,
        impact=impact,
        affected_employee_ids=_unique(employees),
        affected_asset_ids=(candidate.asset_id,),
        affected_assignment_ids=tuple(a.id for a in related),
        auto_resolvable=auto_resolvable,
        detected_at=context.detected_at,
    )


class DetectionPass(ABC):
    """One independent detection pass over a candidate and snapshot."""

    name = "pass"

    @abstractmethod
    def detect(
        self,
        candidate: CandidateAssignment,
        snapshot: Snapshot,
        context: DetectionContext,
    ) -> List[Conflict]:
        """Return conflicts found by this pass; empty when the candidate is clean."""


class ResourcePass(DetectionPass):
    name = "resource"

    def detect(self, candidate, snapshot, context):
        active = snapshot.active_assignments_for_asset(candidate.asset_id, candidate.category)

        if candidate.category == AssetCategory.HARDWARE:
            if not active:
                return []
            return [make_conflict(
                ConflictCause.HARDWARE_DOUBLE_BOOKED,
                Severity.CRITICAL,
                "Hardware already assigned",
                "This hardware is already actively assigned to another holder.",
                "The new assignment cannot proceed until the current holder returns the asset.",
                candidate, context, related=active,
            )]

        software = snapshot.asset(candidate.asset_id, AssetCategory.SOFTWARE)
        if software is not None:
            capacity = license_capacity(software, context.policy)
        else:
            capacity = context.policy.software_fallback_capacity
        if len(active) < capacity:
            return []
        return [make_conflict(
            ConflictCause.LICENSE_EXHAUSTED,
            Severity.HIGH,
            "Software license limit reached",
            f"All {capacity} licenses for this software are assigned.",
            "Return an existing license or purchase additional seats.",
            candidate, context, related=active,
        )]


class SchedulingPass(DetectionPass):
    name = "scheduling"

    def detect(self, candidate, snapshot, context):
        conflicts = []
        active = snapshot.active_assignments_for_asset(candidate.asset_id, candidate.category)

        duplicates = [a for a in active if a.employee_id == candidate.employee_id]
        if duplicates:
            conflicts.append(make_conflict(
                ConflictCause.DUPLICATE_ASSIGNMENT,
                Severity.HIGH,
                "Duplicate assignment",
                "The employee already holds this asset.",
                "Duplicate records make the asset register unreliable.",
                candidate, context, related=duplicates, auto_resolvable=True,
            ))

        # An open-ended candidate is already covered by the resource pass
        if candidate.expected_return_date is not None:
            overlapping = [
                a for a in active
                if intervals_overlap(
                    candidate.assigned_date, candidate.expected_return_date,
                    a.assigned_date, a.expected_return_date,
                )
            ]
            if overlapping:
                conflicts.append(make_conflict(
                    ConflictCause.PERIOD_OVERLAP,
                    Severity.MEDIUM,
                    "Assignment periods overlap",
                    "The requested loan period overlaps an existing assignment of this asset.",
                    "The asset cannot be in two places during the overlapping days.",
                    candidate, context, related=overlapping, auto_resolvable=True,
                ))
        return conflicts


class PolicyPass(DetectionPass):
    name = "policy"

    def detect(self, candidate, snapshot, context):
        employee = snapshot.employee(candidate.employee_id)
        if employee is None:
            # Nothing else in this pass can be evaluated without the employee
            return [make_conflict(
                ConflictCause.EMPLOYEE_UNKNOWN,
                Severity.CRITICAL,
                "Employee not found",
                "The employee receiving the asset could not be found.",
                "Assets cannot be assigned to an unknown employee.",
                candidate, context,
            )]

        conflicts = []
        held = snapshot.active_assignments_for_employee(employee.id)
        cap = context.policy.max_assignments_per_employee
        if len(held) >= cap:
            conflicts.append(make_conflict(
                ConflictCause.ASSIGNMENT_CAP_REACHED,
                Severity.HIGH,
                "Assignment cap reached",
                f"{employee.name} already holds the maximum of {cap} assets.",
                "Exceeding the cap makes the employee's assets hard to track.",
                candidate, context, related=held, include_related_employees=False,
            ))

        if not employee.is_active:
            conflicts.append(make_conflict(
                ConflictCause.EMPLOYEE_INACTIVE,
                Severity.HIGH,
                "Inactive employee",
                f"{employee.name} is inactive.",
                "Assets held by inactive employees are hard to recover.",
                candidate, context,
            ))
        return conflicts


class BusinessRulePass(DetectionPass):
    name = "business_rule"

    def detect(self, candidate, snapshot, context):
        asset = snapshot.asset(candidate.asset_id, candidate.category)
        if asset is None:
            return []

        if candidate.category == AssetCategory.HARDWARE:
            if asset.status == HardwareStatus.MAINTENANCE:
                return [make_conflict(
                    ConflictCause.ASSET_IN_MAINTENANCE,
                    Severity.HIGH,
                    "Asset under maintenance",
                    "This hardware is currently under maintenance.",
                    "Hardware under maintenance cannot be used.",
                    candidate, context,
                )]
            if asset.status == HardwareStatus.DISPOSED:
                return [make_conflict(
                    ConflictCause.ASSET_DISPOSED,
                    Severity.CRITICAL,
                    "Asset disposed",
                    "This hardware has been disposed of.",
                    "Disposed hardware cannot be assigned.",
                    candidate, context,
                )]
            return []

        if asset.expiry_date is not None and asset.expiry_date <= candidate.assigned_date:
            return [make_conflict(
                ConflictCause.LICENSE_EXPIRED,
                Severity.HIGH,
                "License expired",
                f"The license expired on {asset.expiry_date.isoformat()}.",
                "Expired licenses cannot be used.",
                candidate, context,
            )]
        return []


class DataIntegrityPass(DetectionPass):
    name = "data_integrity"

    def detect(self, candidate, snapshot, context):
        conflicts = []
        if snapshot.employee(candidate.employee_id) is None:
            conflicts.append(make_conflict(
                ConflictCause.EMPLOYEE_MISSING,
                Severity.CRITICAL,
                "Employee id does not exist",
                f"Employee id {candidate.employee_id} is not present in the directory.",
                "The assignment would reference a missing employee record.",
                candidate, context,
            ))

        if snapshot.asset(candidate.asset_id, candidate.category) is None:
            conflicts.append(make_conflict(
                ConflictCause.ASSET_MISSING,
                Severity.CRITICAL,
                "Asset id does not exist",
                f"{candidate.category.value.capitalize()} id {candidate.asset_id} is not present in the inventory.",
                "The assignment would reference a missing asset record.",
                candidate, context,
            ))

        limit = years_after(context.today, context.policy.max_future_years)
        if candidate.assigned_date > limit:
            conflicts.append(make_conflict(
                ConflictCause.ASSIGNED_DATE_TOO_FAR,
                Severity.MEDIUM,
                "Assigned date too far in the future",
                f"The assigned date {candidate.assigned_date.isoformat()} is after {limit.isoformat()}.",
                "The schedule is unrealistic and probably a data entry error.",
                candidate, context, auto_resolvable=True,
            ))
        return conflicts


def default_passes() -> List[DetectionPass]:
    return [ResourcePass(), SchedulingPass(), PolicyPass(), BusinessRulePass(), DataIntegrityPass()]


class ConflictDetector:
    """
    Registry of detection passes.

    Passes run in registration order. The five standard passes are registered
    unless an explicit list is given.
    """

    def __init__(self, passes: Optional[List[DetectionPass]] = None):
        self.passes: List[DetectionPass] = default_passes() if passes is None else list(passes)

    def register(self, detection_pass: DetectionPass):
        self.passes.append(detection_pass)

    def detect(
        self,
        candidate: CandidateAssignment,
        snapshot: Snapshot,
        context: DetectionContext,
    ) -> List[Conflict]:
        conflicts: List[Conflict] = []
        for detection_pass in self.passes:
            found = detection_pass.detect(candidate, snapshot, context)
            logger.debug(f"{detection_pass.name} pass: {len(found)} conflict(s)")
            conflicts.extend(found)
        return conflicts


def detect_conflicts(
    candidate: CandidateAssignment,
    snapshot: Snapshot,
    policy: Optional[PolicyConfig] = None,
    today: Optional[date] = None,
    now: Optional[datetime] = None,
    detector: Optional[ConflictDetector] = None,
) -> DetectionReport:
    """
    Full check of a candidate: conflicts, advisory warnings and resolution proposals.

    ``today`` anchors date-relative rules (future-date limit, expiry and
    maintenance advisories); ``now`` stamps ``detected_at``. Both default to
    the current UTC clock.
    """
    now = now or utc_now()
    context = DetectionContext(
        today=today or now.date(),
        detected_at=now,
        policy=policy or DEFAULT_POLICY,
    )
    detector = detector or ConflictDetector()

    conflicts = detector.detect(candidate, snapshot, context)
    warnings = generate_warnings(candidate, snapshot, context.policy, context.today)
    proposals = [p for conflict in conflicts for p in plan_resolutions(conflict)]

    if conflicts:
        logger.info(
            f"Candidate {candidate.employee_id}/{candidate.asset_id}: "
            f"{len(conflicts)} conflict(s), {len(warnings)} warning(s), {len(proposals)} proposal(s)"
        )
    return DetectionReport(conflicts=conflicts, warnings=warnings, proposals=proposals)
