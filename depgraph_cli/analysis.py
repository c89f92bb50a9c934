"""Structural analysis over a :class:`~depgraph_cli.graph.Graph`.

Every function here is pure: it reads a graph snapshot and returns a fresh
result.  Callers recompute whenever the current graph changes.
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Optional, Set, Tuple

from .graph import Graph
from .models import Issue, Statistics

DEFAULT_ROOT_ID = "AppModule"
DEFAULT_DEPENDENCY_THRESHOLD = 5

CyclePair = Tuple[str, str]


# ===================================================================
# Cycles
# ===================================================================


class _CycleSearch:
    """Mutable state for the cycle-finding depth-first search.

    The search keeps an explicit stack of ``(node, target iterator)`` frames
    so path length is not bounded by the interpreter's recursion limit.
    """

    def __init__(self, graph: Graph) -> None:
        self.adjacency = graph.adjacency()
        self.visited: Set[str] = set()
        self.on_stack: Set[str] = set()
        self.path: List[str] = []
        self.cycles: List[List[str]] = []

    def _enter(self, node_id: str) -> Tuple[str, Iterator[str]]:
        self.visited.add(node_id)
        self.on_stack.add(node_id)
        self.path.append(node_id)
        return node_id, iter(self.adjacency.get(node_id, []))

    def run(self, root: str) -> None:
        if root in self.visited:
            return
        stack = [self._enter(root)]
        while stack:
            node_id, targets = stack[-1]
            for target in targets:
                if target in self.on_stack:
                    start = self.path.index(target)
                    self.cycles.append(self.path[start:] + [target])
                elif target not in self.visited:
                    stack.append(self._enter(target))
                    break
            else:
                stack.pop()
                self.path.pop()
                self.on_stack.discard(node_id)


def find_cycle_paths(graph: Graph) -> List[List[str]]:
    """Return each cycle closed by a DFS back edge, as ``[n0, n1, ..., n0]``.

    Only the cycle formed by the current path is reported for each back edge;
    this is not an exhaustive enumeration of simple cycles.
    """
    search = _CycleSearch(graph)
    for node_id in graph.node_ids():
        search.run(node_id)
    return search.cycles


def detect_cycles(graph: Graph) -> List[CyclePair]:
    """Return edges lying on a cycle as ``(from, to)`` pairs.

    A pair is reported once regardless of orientation: if ``(A, B)`` was
    emitted, a later ``(B, A)`` is skipped.
    """
    pairs: List[CyclePair] = []
    seen: Set[CyclePair] = set()
    for cycle in find_cycle_paths(graph):
        for src, dst in zip(cycle, cycle[1:]):
            key = _unordered(src, dst)
            if key in seen:
                continue
            seen.add(key)
            pairs.append((src, dst))
    return pairs


def _unordered(a: str, b: str) -> CyclePair:
    return (a, b) if a <= b else (b, a)


# ===================================================================
# Levels
# ===================================================================


def calculate_levels(graph: Graph) -> Dict[str, int]:
    """Depth of each node: one more than the deepest node it points to.

    Sinks get 0.  A node reached again while still in progress contributes 0,
    so levels inside a cycle are a lower bound.
    """
    adjacency = graph.adjacency()
    levels: Dict[str, int] = {}
    in_progress: Set[str] = set()

    def frame(node_id: str) -> list:
        in_progress.add(node_id)
        # [node, distinct targets, deepest target level so far]
        return [node_id, iter(dict.fromkeys(adjacency.get(node_id, []))), -1]

    for root in graph.node_ids():
        if root in levels:
            continue
        stack = [frame(root)]
        while stack:
            top = stack[-1]
            node_id, targets = top[0], top[1]
            for target in targets:
                if target == node_id:
                    continue
                if target in levels:
                    top[2] = max(top[2], levels[target])
                elif target in in_progress:
                    top[2] = max(top[2], 0)
                else:
                    stack.append(frame(target))
                    break
            else:
                stack.pop()
                level = top[2] + 1
                levels[node_id] = level
                in_progress.discard(node_id)
                if stack:
                    stack[-1][2] = max(stack[-1][2], level)
    return levels


def max_depth(levels: Dict[str, int]) -> int:
    return max(levels.values(), default=0)


# ===================================================================
# Statistics & issues
# ===================================================================


def visible_node_ids(graph: Graph, focused: Optional[str] = None) -> List[str]:
    """Nodes a view should show.

    Without a focus, isolated nodes are hidden.  With a focus, every node
    of the (focus) graph is shown.
    """
    if focused:
        return graph.node_ids()
    connected = graph.connected_node_ids()
    return [node_id for node_id in graph.node_ids() if node_id in connected]


def calculate_statistics(graph: Graph, focused: Optional[str] = None) -> Statistics:
    total_modules = len(visible_node_ids(graph, focused))
    total_dependencies = len(graph.edges)
    avg_deps = round(total_dependencies / total_modules, 2) if total_modules else 0.0
    return Statistics(
        total_modules=total_modules,
        total_dependencies=total_dependencies,
        circular_deps=len(detect_cycles(graph)),
        max_depth=max_depth(calculate_levels(graph)),
        avg_deps=avg_deps,
    )


def detect_issues(
    graph: Graph,
    focused: Optional[str] = None,
    root_id: str = DEFAULT_ROOT_ID,
    threshold: int = DEFAULT_DEPENDENCY_THRESHOLD,
) -> List[Issue]:
    """Classify structural problems: cycles, high coupling, isolated nodes.

    Findings come in a fixed order: errors, then warnings, then info.  Each
    cycle yields one error naming the two endpoints of the edge that closed
    it; isolated nodes are only reported outside a focus view.
    """
    issues: List[Issue] = []

    reported: Set[CyclePair] = set()
    for cycle in find_cycle_paths(graph):
        pair = _unordered(cycle[-2], cycle[-1])
        if pair in reported:
            continue
        reported.add(pair)
        issues.append(Issue(
            severity="error",
            title="Circular Dependency",
            description=f"{pair[0]} and {pair[1]} have a circular dependency.",
            node_ids=list(pair),
        ))

    out_degree: Dict[str, int] = {}
    in_degree: Dict[str, int] = {}
    for edge in graph.edges:
        out_degree[edge.src] = out_degree.get(edge.src, 0) + 1
        in_degree[edge.dst] = in_degree.get(edge.dst, 0) + 1

    for node_id in graph.node_ids():
        count = out_degree.get(node_id, 0)
        if count > threshold:
            issues.append(Issue(
                severity="warning",
                title="High Coupling",
                description=f"{node_id} has {count} dependencies, consider refactoring.",
                node_ids=[node_id],
            ))

    if not focused:
        for node_id in graph.node_ids():
            if node_id == root_id:
                continue
            if out_degree.get(node_id, 0) or in_degree.get(node_id, 0):
                continue
            issues.append(Issue(
                severity="info",
                title="Isolated Component",
                description=f"{node_id} appears to be isolated from the dependency graph.",
                node_ids=[node_id],
            ))

    return issues


def filter_nodes_by_search(graph: Graph, term: str) -> List[str]:
    """Ids whose text contains *term*, case-insensitively; all ids if empty."""
    if not term:
        return graph.node_ids()
    needle = term.lower()
    return [node_id for node_id in graph.node_ids() if needle in node_id.lower()]
