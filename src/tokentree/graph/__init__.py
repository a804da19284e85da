"""
Dependency graphs, cycle detection and resolution ordering.
"""

from tokentree.graph.cycles import (
    CycleDetectionResult,
    detect_cycles,
    find_cycles,
    find_shortest_cycle,
    topological_sort,
    would_create_cycle,
)
from tokentree.graph.dependency import (
    DependencyGraph,
    build_dependency_graph,
    get_all_references,
)

__all__ = [
    "DependencyGraph",
    "build_dependency_graph",
    "get_all_references",
    "CycleDetectionResult",
    "detect_cycles",
    "find_cycles",
    "find_shortest_cycle",
    "topological_sort",
    "would_create_cycle",
]
