"""
Bounded automated resolution.

Applies one resolution proposal to a candidate and returns a revised
candidate. Nothing is persisted: the caller must run detection again on the
revised candidate and re-validate immediately before committing, since the
snapshot may be stale by then.
"""

import logging
from dataclasses import replace
from typing import List, Optional

from assetguard.config.policy import DEFAULT_POLICY, PolicyConfig
from assetguard.engine.availability import resolve_availability
from assetguard.models.entities import (
    Asset,
    AssetCategory,
    Assignment,
    CandidateAssignment,
    Snapshot,
)
from assetguard.models.findings import (
    Conflict,
    ResolutionOutcome,
    ResolutionProposal,
    ResolutionStrategy,
)

logger = logging.getLogger(__name__)

MANUAL_REVIEW_REQUIRED = "manual review required"


def _same_model(asset: Asset, original: Optional[Asset]) -> bool:
    if original is None or asset.category != AssetCategory.HARDWARE:
        return False
    return (asset.manufacturer, asset.model) == (original.manufacturer, original.model)


def find_alternative_asset(
    candidate: CandidateAssignment,
    snapshot: Snapshot,
    policy: PolicyConfig = DEFAULT_POLICY,
) -> Optional[Asset]:
    """
    Best available substitute of the same category.

    Prefers the same manufacturer/model, then assets without restrictions,
    then lowest id so the choice is deterministic.
    """
    original = snapshot.asset(candidate.asset_id, candidate.category)
    options = []
    for asset in snapshot.assets(candidate.category):
        if asset.id == candidate.asset_id:
            continue
        info = resolve_availability(asset.id, candidate.category, snapshot, policy)
        if info.is_available:
            options.append((not _same_model(asset, original), bool(info.restrictions), asset.id, asset))
    if not options:
        return None
    return min(options, key=lambda o: o[:3])[3]


def _blocking_assignments(conflict: Conflict, candidate: CandidateAssignment, snapshot: Snapshot) -> List[Assignment]:
    affected = set(conflict.affected_assignment_ids)
    if affected:
        blockers = [a for a in snapshot.assignments if a.id in affected]
    else:
        blockers = snapshot.active_assignments_for_asset(candidate.asset_id, candidate.category)
    if not blockers:
        raise LookupError(f"no blocking assignments found for conflict {conflict.id}")
    return blockers


def reschedule_after_blockers(
    conflict: Conflict,
    candidate: CandidateAssignment,
    snapshot: Snapshot,
) -> CandidateAssignment:
    """
    Move the candidate to start when the last blocking assignment is due back.

    Periods are half-open, so starting on the blocker's return date does not
    overlap it. The candidate's loan length is kept when it has one.
    """
    blockers = _blocking_assignments(conflict, candidate, snapshot)
    open_ended = [a.id for a in blockers if a.expected_return_date is None]
    if open_ended:
        raise ValueError(f"blocking assignment(s) {', '.join(open_ended)} have no expected return date")

    new_start = max([candidate.assigned_date] + [a.expected_return_date for a in blockers])
    new_end = None
    if candidate.expected_return_date is not None:
        new_end = new_start + (candidate.expected_return_date - candidate.assigned_date)
    return replace(candidate, assigned_date=new_start, expected_return_date=new_end)


def _failure(message: str, proposal: ResolutionProposal) -> ResolutionOutcome:
    return ResolutionOutcome(success=False, message=message, fallback_options=proposal.alternatives)


def attempt_automated_resolution(
    conflict: Conflict,
    proposal: ResolutionProposal,
    candidate: CandidateAssignment,
    snapshot: Snapshot,
    policy: Optional[PolicyConfig] = None,
) -> ResolutionOutcome:
    policy = policy or DEFAULT_POLICY

    if not proposal.automated or proposal.confidence < policy.automation_confidence_threshold:
        logger.info(
            f"Conflict {conflict.id}: {proposal.strategy.value} declined "
            f"(automated={proposal.automated}, confidence={proposal.confidence})"
        )
        return _failure(MANUAL_REVIEW_REQUIRED, proposal)

    if proposal.conflict_id != conflict.id:
        return _failure(f"proposal belongs to conflict {proposal.conflict_id}, not {conflict.id}", proposal)

    try:
        if proposal.strategy == ResolutionStrategy.ALTERNATIVE_ASSET:
            alternative = find_alternative_asset(candidate, snapshot, policy)
            if alternative is None:
                return _failure(f"no available {candidate.category.value} asset can replace {candidate.asset_id}", proposal)
            revised = replace(candidate, asset_id=alternative.id)
            message = f"substituted {candidate.asset_id} with {alternative.id}"
        elif proposal.strategy == ResolutionStrategy.RESCHEDULE:
            revised = reschedule_after_blockers(conflict, candidate, snapshot)
            message = f"rescheduled to start on {revised.assigned_date.isoformat()}"
        else:
            return _failure(f"{proposal.strategy.value} cannot be automated", proposal)
    except (LookupError, ValueError) as exc:
        logger.warning(f"Automated resolution of {conflict.id} failed: {exc}")
        return _failure(f"automated resolution failed: {exc}", proposal)

    logger.info(f"Conflict {conflict.id}: {message}")
    return ResolutionOutcome(success=True, message=message, revised_candidate=revised)
