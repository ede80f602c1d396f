"""
Asset availability resolution.

Answers "can this asset take a new assignment right now?" without looking at
who is asking. Employee-level policy lives in the eligibility validator.

Hardware is single-holder: available iff its status is ``available`` and no
active assignment references it. Software is license-counted: available iff
the number of active assignments is below license capacity.
"""

import logging
from datetime import date
from typing import List, Optional

from assetguard.config.policy import DEFAULT_POLICY, PolicyConfig
from assetguard.models.entities import (
    AssetCategory,
    Assignment,
    AssignmentStatus,
    HardwareAsset,
    HardwareCondition,
    HardwareStatus,
    Snapshot,
    SoftwareAsset,
    coerce_enum,
)
from assetguard.models.findings import (
    AvailabilityInfo,
    Restriction,
    RestrictionSeverity,
    RestrictionType,
)

logger = logging.getLogger(__name__)

NOT_FOUND = "not_found"
LICENSE_FULL = "license_full"


def license_capacity(software: SoftwareAsset, policy: PolicyConfig = DEFAULT_POLICY) -> int:
    """License capacity, falling back to the policy constant when unrecorded."""
    if software.license_capacity is None:
        return policy.software_fallback_capacity
    return software.license_capacity


def utilization_percent(current_users: int, capacity: int) -> float:
    if capacity <= 0:
        return 100.0
    return current_users / capacity * 100


def hardware_restrictions(hardware: HardwareAsset) -> List[Restriction]:
    restrictions: List[Restriction] = []
    if hardware.maintenance_scheduled:
        restrictions.append(Restriction(
            type=RestrictionType.MAINTENANCE,
            message="Maintenance is scheduled for this asset.",
            severity=RestrictionSeverity.WARNING,
            can_override=True,
        ))
    if hardware.condition == HardwareCondition.POOR:
        restrictions.append(Restriction(
            type=RestrictionType.MAINTENANCE,
            message="Hardware is in poor condition.",
            severity=RestrictionSeverity.WARNING,
            can_override=True,
            override_permission="manager",
        ))
    return restrictions


def license_restrictions(utilization: float, policy: PolicyConfig = DEFAULT_POLICY) -> List[Restriction]:
    if utilization >= policy.utilization_error_percent:
        return [Restriction(
            type=RestrictionType.LICENSE_LIMIT,
            message="License limit reached.",
            severity=RestrictionSeverity.ERROR,
        )]
    if utilization >= policy.utilization_warning_percent:
        return [Restriction(
            type=RestrictionType.LICENSE_LIMIT,
            message="License limit nearly reached.",
            severity=RestrictionSeverity.WARNING,
        )]
    return []


def _hardware_availability(hardware: HardwareAsset, snapshot: Snapshot) -> AvailabilityInfo:
    active = snapshot.active_assignments_for_asset(hardware.id, AssetCategory.HARDWARE)
    holder = active[0] if active else None
    is_available = holder is None and hardware.status == HardwareStatus.AVAILABLE

    if holder is not None:
        status = HardwareStatus.ASSIGNED.value
        reason = f"Currently assigned to employee {holder.employee_id}"
    else:
        status = hardware.status.value
        reason = None if is_available else f"Asset status is {hardware.status.value}"

    return AvailabilityInfo(
        asset_id=hardware.id,
        name=hardware.name,
        category=AssetCategory.HARDWARE,
        is_available=is_available,
        status=status,
        current_assignment=holder,
        reason=reason,
        restrictions=tuple(hardware_restrictions(hardware)),
        next_available=holder.expected_return_date if holder else None,
    )


def _software_availability(software: SoftwareAsset, snapshot: Snapshot, policy: PolicyConfig) -> AvailabilityInfo:
    active = snapshot.active_assignments_for_asset(software.id, AssetCategory.SOFTWARE)
    capacity = license_capacity(software, policy)
    current_users = len(active)
    utilization = utilization_percent(current_users, capacity)
    is_available = current_users < capacity

    return AvailabilityInfo(
        asset_id=software.id,
        name=software.name,
        category=AssetCategory.SOFTWARE,
        is_available=is_available,
        status="available" if is_available else LICENSE_FULL,
        current_assignment=active[0] if active else None,
        reason=None if is_available else "License limit reached.",
        restrictions=tuple(license_restrictions(utilization, policy)),
        utilization=utilization,
        capacity=capacity,
        current_users=current_users,
    )


def resolve_availability(
    asset_id: str,
    category: AssetCategory,
    snapshot: Snapshot,
    policy: Optional[PolicyConfig] = None,
) -> AvailabilityInfo:
    """
    Compute the current availability of one asset.

    An unknown asset id yields a terminal ``not_found`` record with
    ``is_available=False``; callers treat it like a data-integrity conflict.
    """
    policy = policy or DEFAULT_POLICY
    category = coerce_enum(AssetCategory, category, "category")
    asset = snapshot.asset(asset_id, category)

    if asset is None:
        logger.debug(f"Availability lookup for unknown {category.value} asset {asset_id}")
        return AvailabilityInfo(
            asset_id=asset_id,
            name="Unknown asset",
            category=category,
            is_available=False,
            status=NOT_FOUND,
            reason="Asset not found.",
        )

    if category == AssetCategory.HARDWARE:
        return _hardware_availability(asset, snapshot)
    return _software_availability(asset, snapshot, policy)


def find_overlapping_assignments(
    asset_id: str,
    proposed_date: date,
    assignments: List[Assignment],
) -> List[Assignment]:
    """
    Assignments of ``asset_id`` that would still hold it on ``proposed_date``.

    Returned assignments are ignored. With an actual return date the proposed
    date must fall within ``[assigned, return_date]``; without one, an active
    assignment holds the asset regardless of its expected return.
    """
    overlapping = []
    for assignment in assignments:
        if assignment.asset_id != asset_id:
            continue
        if assignment.status == AssignmentStatus.RETURNED:
            continue
        if assignment.return_date is not None:
            if assignment.assigned_date <= proposed_date <= assignment.return_date:
                overlapping.append(assignment)
        elif assignment.is_active:
            overlapping.append(assignment)
    return overlapping
