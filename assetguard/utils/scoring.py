from typing import Iterable, List

from assetguard.models.findings import Conflict, Severity

SEVERITY_WEIGHTS = {
    Severity.CRITICAL: 8.0,
    Severity.HIGH: 4.0,
    Severity.MEDIUM: 2.0,
    Severity.LOW: 1.0,
}


def severity_rank(severity: Severity) -> int:
    return severity.rank


def rank_conflicts(conflicts: Iterable[Conflict]) -> List[Conflict]:
    """Most severe first; ties keep detection order."""
    return sorted(conflicts, key=lambda c: -severity_rank(c.severity))


def score_report(conflicts: Iterable[Conflict]) -> float:
    return sum(SEVERITY_WEIGHTS[c.severity] for c in conflicts)
