"""
Resolution planning.

Every ConflictCause maps to a tuple of proposal templates. The table is total:
causes with no known remediation map to an empty tuple, and a module-level
check fails at import time if a cause is missing.
"""

from dataclasses import dataclass, replace
from typing import Dict, List, Tuple

from assetguard.models.findings import (
    Conflict,
    ConflictCause,
    ResolutionProposal,
    ResolutionStrategy,
)

IMMEDIATE = "immediate"


@dataclass(frozen=True)
class ProposalTemplate:
    strategy: ResolutionStrategy
    title: str
    description: str
    steps: Tuple[str, ...]
    automated: bool
    confidence: float
    estimated_resolution_time: str

    def bind(self, conflict: Conflict) -> ResolutionProposal:
        return ResolutionProposal(
            conflict_id=conflict.id,
            strategy=self.strategy,
            title=self.title,
            description=self.description,
            steps=self.steps,
            automated=self.automated,
            confidence=self.confidence,
            estimated_resolution_time=self.estimated_resolution_time,
        )


SUBSTITUTE_HARDWARE = ProposalTemplate(
    strategy=ResolutionStrategy.ALTERNATIVE_ASSET,
    title="Offer alternative hardware",
    description="Substitute an available asset with a similar specification.",
    steps=(
        "Search available hardware of the same type",
        "Shortlist assets with a matching manufacturer and model",
        "Offer the substitute to the employee",
        "Assign the substitute once approved",
    ),
    automated=True,
    confidence=0.8,
    estimated_resolution_time="5-10 minutes",
)

WAIT_FOR_RETURN = ProposalTemplate(
    strategy=ResolutionStrategy.RESCHEDULE,
    title="Reschedule after return",
    description="Move the assignment to the current holder's expected return date.",
    steps=(
        "Look up the current holder's expected return date",
        "Compute the new assigned date",
        "Propose the new schedule",
        "Book the new schedule once approved",
    ),
    automated=False,
    confidence=0.6,
    estimated_resolution_time="1-2 days",
)

RESCHEDULE_PERIOD = ProposalTemplate(
    strategy=ResolutionStrategy.RESCHEDULE,
    title="Reschedule the assignment",
    description="Shift the requested period past the overlapping assignment.",
    steps=(
        "Analyse the current assignment schedule",
        "Compute the earliest non-overlapping period",
        "Notify the affected parties of the change",
        "Update the schedule once approved",
    ),
    automated=True,
    confidence=0.9,
    estimated_resolution_time=IMMEDIATE,
)

REQUEST_CAP_EXCEPTION = ProposalTemplate(
    strategy=ResolutionStrategy.MANUAL_REVIEW,
    title="Request manager approval",
    description="Ask a manager to approve a policy exception.",
    steps=(
        "File an exception request",
        "Send the request to a manager for review",
        "Verify the business need",
        "Process the assignment as an exception once approved",
    ),
    automated=False,
    confidence=0.5,
    estimated_resolution_time="1-3 days",
)

SUBSTITUTE_SERVICED_ASSET = ProposalTemplate(
    strategy=ResolutionStrategy.ALTERNATIVE_ASSET,
    title="Assign a serviced substitute",
    description="Substitute a similar asset that is not under maintenance.",
    steps=(
        "Search assets of the same type that are not under maintenance",
        "Build a list of possible substitutes",
        "Check condition and specification of each substitute",
        "Propose the best substitute",
    ),
    automated=True,
    confidence=0.7,
    estimated_resolution_time="10-15 minutes",
)

CORRECT_RECORDS = ProposalTemplate(
    strategy=ResolutionStrategy.MANUAL_REVIEW,
    title="Request data correction",
    description="Ask a system administrator to correct the inconsistent records.",
    steps=(
        "Analyse the data inconsistency",
        "File a correction request",
        "Have a system administrator review it",
        "Retry once the data is corrected",
    ),
    automated=False,
    confidence=0.3,
    estimated_resolution_time="1-5 days",
)


RESOLUTION_TABLE: Dict[ConflictCause, Tuple[ProposalTemplate, ...]] = {
    ConflictCause.HARDWARE_DOUBLE_BOOKED: (SUBSTITUTE_HARDWARE, WAIT_FOR_RETURN),
    ConflictCause.LICENSE_EXHAUSTED: (),
    ConflictCause.DUPLICATE_ASSIGNMENT: (RESCHEDULE_PERIOD,),
    ConflictCause.PERIOD_OVERLAP: (RESCHEDULE_PERIOD,),
    ConflictCause.EMPLOYEE_UNKNOWN: (),
    ConflictCause.ASSIGNMENT_CAP_REACHED: (REQUEST_CAP_EXCEPTION,),
    ConflictCause.EMPLOYEE_INACTIVE: (),
    ConflictCause.ASSET_IN_MAINTENANCE: (SUBSTITUTE_SERVICED_ASSET,),
    ConflictCause.ASSET_DISPOSED: (),
    ConflictCause.LICENSE_EXPIRED: (),
    ConflictCause.EMPLOYEE_MISSING: (CORRECT_RECORDS,),
    ConflictCause.ASSET_MISSING: (CORRECT_RECORDS,),
    ConflictCause.ASSIGNED_DATE_TOO_FAR: (CORRECT_RECORDS,),
}

_missing = set(ConflictCause) - set(RESOLUTION_TABLE)
if _missing:
    raise RuntimeError(f"RESOLUTION_TABLE has no entry for: {sorted(c.value for c in _missing)}")


def plan_resolutions(conflict: Conflict) -> List[ResolutionProposal]:
    """Proposals for one conflict, each listing the others as alternatives."""
    proposals = [template.bind(conflict) for template in RESOLUTION_TABLE[conflict.cause]]
    return [
        replace(p, alternatives=tuple(q for q in proposals if q is not p))
        for p in proposals
    ]
