"""
Cycle detection and dependency ordering.

Cycles are found with Tarjan's strongly-connected-components algorithm and
the resolution order with Kahn's algorithm. Both run over a plain adjacency
mapping (``node -> nodes it depends on``), so the same functions serve token
graphs and file graphs. Both are iterative; reference chains of any length are
handled without touching the interpreter recursion limit.

Nothing here raises for cyclic input: cycles are reported through
`CycleDetectionResult`.
"""

import heapq
import logging
from collections import deque
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from tokentree.core.tree_node import GroupNode
from tokentree.core.types import TokenDocument
from tokentree.graph.dependency import DependencyGraph, build_dependency_graph

logger = logging.getLogger(__name__)

AdjacencyLike = Mapping[str, Iterable[str]]
CycleSource = GroupNode | DependencyGraph | TokenDocument | AdjacencyLike


@dataclass
class CycleDetectionResult:
    """
    Outcome of cycle detection.

    Params:
        has_cycles: True when at least one cycle exists
        cycles: One list per strongly connected component of size > 1, or
            ``[path]`` for a node referencing itself
        cyclic_tokens: Union of all cycle members
        topological_order: Dependencies-first order of every graph node, or
            None when the graph has cycles
    """

    has_cycles: bool = False
    cycles: list[list[str]] = field(default_factory=list)
    cyclic_tokens: set[str] = field(default_factory=set)
    topological_order: list[str] | None = field(default_factory=list)


def _ordered_adjacency(adjacency: AdjacencyLike) -> dict[str, list[str]]:
    """Copy an adjacency mapping with deterministic, duplicate-free target lists."""
    ordered: dict[str, list[str]] = {}
    for source, targets in adjacency.items():
        if isinstance(targets, (set, frozenset)):
            ordered[source] = sorted(targets)
        else:
            ordered[source] = list(dict.fromkeys(targets))
    return ordered


def _graph_nodes(adjacency: dict[str, list[str]], extra: Iterable[str] = ()) -> list[str]:
    """Every node of the graph (extra nodes first), in first-seen order."""
    seen: dict[str, None] = dict.fromkeys(extra)
    for source, targets in adjacency.items():
        seen.setdefault(source)
        for target in targets:
            seen.setdefault(target)
    return list(seen)


def find_cycles(adjacency: AdjacencyLike, nodes: Iterable[str] = ()) -> list[list[str]]:
    """
    Find every cycle in a graph using Tarjan's algorithm.

    Params:
        adjacency: Node -> nodes it depends on
        nodes: Optional nodes to visit first, in this order

    Returns:
        Cycles in extraction order; members of each cycle in stack-pop order
    """
    graph = _ordered_adjacency(adjacency)
    index_of: dict[str, int] = {}
    lowlink: dict[str, int] = {}
    stack: list[str] = []
    on_stack: set[str] = set()
    cycles: list[list[str]] = []

    def push(node: str) -> None:
        index_of[node] = lowlink[node] = len(index_of)
        stack.append(node)
        on_stack.add(node)

    for root in _graph_nodes(graph, nodes):
        if root in index_of:
            continue
        push(root)
        # Explicit DFS stack of (node, iterator over its successors)
        work = [(root, iter(graph.get(root, ())))]
        while work:
            node, successors = work[-1]
            descended = False
            for successor in successors:
                if successor not in index_of:
                    push(successor)
                    work.append((successor, iter(graph.get(successor, ()))))
                    descended = True
                    break
                if successor in on_stack:
                    lowlink[node] = min(lowlink[node], index_of[successor])
            if descended:
                continue

            work.pop()
            if work:
                caller = work[-1][0]
                lowlink[caller] = min(lowlink[caller], lowlink[node])

            if lowlink[node] != index_of[node]:
                continue
            component = []
            while True:
                member = stack.pop()
                on_stack.discard(member)
                component.append(member)
                if member == node:
                    break
            if len(component) > 1 or node in graph.get(node, ()):
                cycles.append(component)

    return cycles


def topological_sort(
    adjacency: AdjacencyLike, nodes: Iterable[str] = ()
) -> tuple[list[str], list[str]]:
    """
    Order a graph dependencies-first with Kahn's algorithm.

    Ties are broken by first-seen order, so the result is deterministic.

    Params:
        adjacency: Node -> nodes it depends on
        nodes: Extra nodes to include (isolated nodes, or a preferred order)

    Returns:
        Tuple of (ordered nodes, blocked nodes). Blocked nodes sit on a cycle or
        depend on one; the order is complete iff nothing is blocked.
    """
    graph = _ordered_adjacency(adjacency)
    order = _graph_nodes(graph, nodes)
    position = {node: i for i, node in enumerate(order)}

    remaining = {node: len(graph.get(node, ())) for node in order}
    dependents: dict[str, list[str]] = {node: [] for node in order}
    for source, targets in graph.items():
        for target in targets:
            dependents[target].append(source)

    ready = [position[node] for node in order if remaining[node] == 0]
    heapq.heapify(ready)
    ordered: list[str] = []
    while ready:
        node = order[heapq.heappop(ready)]
        ordered.append(node)
        for dependent in dependents[node]:
            remaining[dependent] -= 1
            if remaining[dependent] == 0:
                heapq.heappush(ready, position[dependent])

    blocked = [node for node in order if remaining[node] > 0]
    return ordered, blocked


def _looks_like_adjacency(source: Mapping) -> bool:
    return all(
        isinstance(targets, (set, frozenset, list, tuple)) for targets in source.values()
    )


def _as_adjacency(source: CycleSource) -> AdjacencyLike:
    if isinstance(source, DependencyGraph):
        return source.dependencies
    if isinstance(source, GroupNode):
        return build_dependency_graph(source).dependencies
    if _looks_like_adjacency(source):
        return source
    return build_dependency_graph(source).dependencies


def detect_cycles(source: CycleSource) -> CycleDetectionResult:
    """
    Detect reference cycles and compute a resolution order.

    Params:
        source: Built tree, raw document, DependencyGraph, or adjacency mapping

    Returns:
        CycleDetectionResult; ``topological_order`` is None iff cycles were found
        and ``[]`` for a graph without edges
    """
    adjacency = _as_adjacency(source)
    cycles = find_cycles(adjacency)
    cyclic_tokens = {member for cycle in cycles for member in cycle}

    topological_order = None
    if not cycles:
        topological_order, _ = topological_sort(adjacency)

    logger.debug(
        "Cycle detection over %d sources found %d cycles", len(adjacency), len(cycles)
    )
    return CycleDetectionResult(
        has_cycles=bool(cycles),
        cycles=cycles,
        cyclic_tokens=cyclic_tokens,
        topological_order=topological_order,
    )


def find_shortest_cycle(source: CycleSource, start: str) -> list[str] | None:
    """
    Find the shortest cycle passing through ``start``.

    Params:
        source: Anything accepted by `detect_cycles`
        start: Node the cycle must pass through

    Returns:
        Cycle members beginning with ``start`` (not repeated at the end), or
        None when ``start`` is not on a cycle
    """
    graph = _ordered_adjacency(_as_adjacency(source))
    previous: dict[str, str] = {}
    queue = deque(graph.get(start, ()))
    for target in queue:
        previous.setdefault(target, start)

    while queue:
        node = queue.popleft()
        if node == start:
            cycle = [start]
            current = previous[start]
            while current != start:
                cycle.append(current)
                current = previous[current]
            cycle[1:] = reversed(cycle[1:])
            return cycle
        for target in graph.get(node, ()):
            if target not in previous:
                previous[target] = node
                queue.append(target)
    return None


def would_create_cycle(source: CycleSource, from_path: str, to_path: str) -> bool:
    """
    Check whether adding the edge ``from_path -> to_path`` would close a cycle.

    Params:
        source: Anything accepted by `detect_cycles`
        from_path: Node that would gain the dependency
        to_path: Node it would depend on

    Returns:
        True if ``to_path`` already reaches ``from_path`` (or they are equal)
    """
    if from_path == to_path:
        return True
    graph = _ordered_adjacency(_as_adjacency(source))
    seen = {to_path}
    queue = deque([to_path])
    while queue:
        node = queue.popleft()
        for target in graph.get(node, ()):
            if target == from_path:
                return True
            if target not in seen:
                seen.add(target)
                queue.append(target)
    return False
