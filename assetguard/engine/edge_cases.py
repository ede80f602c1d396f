"""
Edge-case playbooks.

Each scenario pairs a detector over the whole snapshot with fixed resolution
and preventive checklists. Unlike conflict detection these look at the
existing population of assignments, not at a single candidate.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Callable, Dict, List, Optional, Tuple

from assetguard.config.policy import DEFAULT_POLICY, PolicyConfig
from assetguard.graph.assignment_graph import build_assignment_graph
from assetguard.models.entities import (
    AssetCategory,
    AssignmentStatus,
    HardwareStatus,
    Snapshot,
    coerce_enum,
)
from assetguard.models.findings import EdgeCaseReport, EdgeCaseScenario
from assetguard.utils.dates import months_before, today_utc

Detector = Callable[[Snapshot, PolicyConfig, date], List[str]]


@dataclass(frozen=True)
class Playbook:
    description: str
    resolution: Tuple[str, ...]
    preventive: Tuple[str, ...]


def _expired_assets(snapshot: Snapshot, policy: PolicyConfig, today: date) -> List[str]:
    affected = []
    for a in snapshot.assignments:
        if not a.is_active or a.category != AssetCategory.SOFTWARE:
            continue
        software = snapshot.asset(a.asset_id, AssetCategory.SOFTWARE)
        if software is not None and software.expiry_date is not None and software.expiry_date <= today:
            affected.append(a.id)
    return affected


def _inactive_employees(snapshot: Snapshot, policy: PolicyConfig, today: date) -> List[str]:
    affected = []
    for a in snapshot.assignments:
        employee = snapshot.employee(a.employee_id)
        if a.is_active and employee is not None and not employee.is_active:
            affected.append(a.id)
    return affected


def _maintenance_conflicts(snapshot: Snapshot, policy: PolicyConfig, today: date) -> List[str]:
    affected = []
    for a in snapshot.assignments:
        if not a.is_active or a.category != AssetCategory.HARDWARE:
            continue
        hardware = snapshot.asset(a.asset_id, AssetCategory.HARDWARE)
        if hardware is not None and (hardware.status == HardwareStatus.MAINTENANCE or hardware.maintenance_scheduled):
            affected.append(a.id)
    return affected


def _expiring_licenses(snapshot: Snapshot, policy: PolicyConfig, today: date) -> List[str]:
    affected = []
    for a in snapshot.assignments:
        if not a.is_active or a.category != AssetCategory.SOFTWARE:
            continue
        software = snapshot.asset(a.asset_id, AssetCategory.SOFTWARE)
        if software is None or software.expiry_date is None:
            continue
        if today < software.expiry_date and today >= months_before(software.expiry_date, 1):
            affected.append(a.id)
    return affected


def _bulk_returns(snapshot: Snapshot, policy: PolicyConfig, today: date) -> List[str]:
    window_start = today - timedelta(days=7)
    returned = [
        a.id for a in snapshot.assignments
        if a.status == AssignmentStatus.RETURNED
        and a.return_date is not None
        and window_start <= a.return_date <= today
    ]
    return returned if len(returned) > policy.bulk_return_threshold else []


def _cascade_effects(snapshot: Snapshot, policy: PolicyConfig, today: date) -> List[str]:
    graph = build_assignment_graph(a for a in snapshot.assignments if a.is_active)
    affected = set()
    for assignment_id, neighbours in graph.items():
        if len(neighbours) >= policy.cascade_threshold:
            affected.add(assignment_id)
            affected |= neighbours
    return sorted(affected)


PLAYBOOKS: Dict[EdgeCaseScenario, Tuple[Playbook, Detector]] = {
    EdgeCaseScenario.EXPIRED_ASSET: (Playbook(
        description="Assets with an expired license are still assigned.",
        resolution=(
            "List the expired assets",
            "Suspend the affected assignments",
            "Review renewal or replacement options",
            "Reassign a replacement or renew the license",
        ),
        preventive=(
            "Monitor asset expiry dates",
            "Send automatic notices 30 days before expiry",
            "Automate the license renewal process",
            "Audit asset status regularly",
        ),
    ), _expired_assets),
    EdgeCaseScenario.INACTIVE_EMPLOYEE: (Playbook(
        description="Inactive employees still hold assets.",
        resolution=(
            "List the inactive employees",
            "Review each employee's existing assignments",
            "Plan asset recovery and reassignment",
            "Reassign the recovered assets to active employees",
        ),
        preventive=(
            "Notify asset managers when an employee's status changes",
            "Include asset return in the offboarding process",
            "Synchronise employee status with the directory regularly",
            "Block inactive accounts automatically",
        ),
    ), _inactive_employees),
    EdgeCaseScenario.MAINTENANCE_CONFLICT: (Playbook(
        description="Assigned hardware is under or scheduled for maintenance.",
        resolution=(
            "Check the maintenance schedule",
            "Align the assignment with the maintenance window",
            "Secure a substitute asset",
            "Reschedule or assign the substitute",
        ),
        preventive=(
            "Announce maintenance windows in advance",
            "Link the assignment calendar to the maintenance schedule",
            "Plan preventive maintenance",
            "Keep enough spare assets",
        ),
    ), _maintenance_conflicts),
    EdgeCaseScenario.LICENSE_EXPIRY: (Playbook(
        description="Assigned licenses expire within a month and will need mass reassignment.",
        resolution=(
            "Identify the expiring licenses",
            "List every affected assignment",
            "Review renewal or alternative products",
            "Renew or release the assignments",
        ),
        preventive=(
            "Track license expiry",
            "Automate renewals",
            "Monitor license usage",
            "Automate contract renewal reminders",
        ),
    ), _expiring_licenses),
    EdgeCaseScenario.BULK_RETURN: (Playbook(
        description="An unusually large number of assets were returned in the last week.",
        resolution=(
            "Queue the pending return requests",
            "Process returns in batches",
            "Spread processing to limit system load",
            "Monitor and verify the results",
        ),
        preventive=(
            "Optimise batch processing",
            "Schedule bulk operations",
            "Monitor system resources",
            "Manage bulk work through a job queue",
        ),
    ), _bulk_returns),
    EdgeCaseScenario.CASCADE_EFFECT: (Playbook(
        description="A single change would ripple through many linked assignments.",
        resolution=(
            "Analyse the scope of impact",
            "Simulate the cascading changes",
            "Plan the change in stages",
            "Notify the affected parties before executing",
        ),
        preventive=(
            "Use dependency analysis before changes",
            "Assess change impact as part of the process",
            "Rehearse changes in a test environment",
            "Prepare a rollback plan",
        ),
    ), _cascade_effects),
}


def assess_edge_case(
    scenario: EdgeCaseScenario,
    snapshot: Snapshot,
    policy: Optional[PolicyConfig] = None,
    today: Optional[date] = None,
) -> EdgeCaseReport:
    scenario = coerce_enum(EdgeCaseScenario, scenario, "scenario")
    playbook, detector = PLAYBOOKS[scenario]
    affected = detector(snapshot, policy or DEFAULT_POLICY, today or today_utc())
    return EdgeCaseReport(
        scenario=scenario,
        detected=bool(affected),
        description=playbook.description,
        resolution_steps=playbook.resolution,
        preventive_steps=playbook.preventive,
        affected_assignment_ids=tuple(affected),
    )


def assess_all_edge_cases(
    snapshot: Snapshot,
    policy: Optional[PolicyConfig] = None,
    today: Optional[date] = None,
) -> List[EdgeCaseReport]:
    today = today or today_utc()
    return [assess_edge_case(s, snapshot, policy, today) for s in EdgeCaseScenario]
