from collections import defaultdict
from typing import Dict, Iterable, List, Set

from assetguard.models.entities import Assignment


def build_assignment_graph(assignments: Iterable[Assignment]) -> Dict[str, Set[str]]:
    """Undirected graph over assignment ids; edges join assignments sharing an employee or an asset."""
    assignments = list(assignments)
    graph: Dict[str, Set[str]] = {a.id: set() for a in assignments}
    by_key: Dict[tuple, List[str]] = defaultdict(list)
    for a in assignments:
        by_key[("employee", a.employee_id)].append(a.id)
        by_key[("asset", a.category, a.asset_id)].append(a.id)

    for ids in by_key.values():
        for i, first in enumerate(ids):
            for second in ids[i + 1 :]:
                graph[first].add(second)
                graph[second].add(first)
    return graph
