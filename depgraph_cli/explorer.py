"""Recursive class-hierarchy crawler.

Starting from one class name, the explorer asks a
:class:`~depgraph_cli.provider.ClassInfoProvider` for the class, records its
parent, its parameters/components/injections and its child classes, then
follows every reference one level deeper.  Work is memoized on the set of
visited names and bounded by two depth caps, so a crawl always terminates and
never fetches the same class twice.

Branches run on a bounded thread pool.  Each work item returns the
follow-up branches it discovered instead of recursing in place, and the root
call schedules them; this keeps the depth semantics of the recursive
formulation without pool threads ever blocking on their own children.
Writes to the shared :class:`ExplorationState` are serialized by its lock.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Dict, List, Optional, Set, Tuple

from .errors import InvalidInputError, ProviderError
from .graph import Graph
from .models import ClassRecord, ClassRef, Edge, EdgeKey, Node, normalize_name
from .provider import ClassInfoProvider

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 5
DEFAULT_CHILD_DEPTH = 3
DEFAULT_WORKERS = 4
DEFAULT_ROOT_OBJECT = "java/lang/Object"

_REF_EDGE_TYPES = (
    ("parameters", "depends"),
    ("components", "provides"),
    ("injections", "injects"),
)

Branch = Tuple[str, int]


class ExplorationState:
    """Shared, lock-guarded accumulator for one crawl.

    Created fresh for each root call and passed by reference to every work
    item.  ``depth`` is the depth the crawl was rooted at.
    """

    def __init__(self, generation: int = 0, depth: int = 0) -> None:
        self.visited: Set[str] = set()
        self.node_map: Dict[str, Node] = {}
        self.link_keys: Dict[EdgeKey, None] = {}
        self.depth = depth
        self.generation = generation
        self.cancelled = threading.Event()
        self.lock = threading.Lock()

    def mark_visited(self, name: str) -> bool:
        """Atomically claim *name*; False if another branch already has it."""
        with self.lock:
            if name in self.visited:
                return False
            self.visited.add(name)
            return True

    def is_visited(self, name: str) -> bool:
        with self.lock:
            return name in self.visited

    def ensure_node(self, node: Node) -> bool:
        with self.lock:
            if node.node_id in self.node_map:
                return False
            self.node_map[node.node_id] = node
            return True

    def add_link(self, src: str, dst: str, edge_type: str) -> bool:
        key = (src, edge_type, dst)
        with self.lock:
            if key in self.link_keys:
                return False
            self.link_keys[key] = None
            return True

    def seed(self, graph: Graph) -> None:
        """Start from an existing graph so exploration is additive."""
        with self.lock:
            for node in graph:
                self.node_map.setdefault(node.node_id, node)
            for edge in graph.edges:
                self.link_keys.setdefault(edge.key, None)

    def to_graph(self) -> Graph:
        with self.lock:
            nodes = list(self.node_map.values())
            edges = [Edge(src=src, dst=dst, edge_type=edge_type)
                     for src, edge_type, dst in self.link_keys]
        return Graph(nodes, edges).sanitize()


def _ref_node(ref: ClassRef) -> Node:
    return Node(
        node_id=ref.name,
        node_type="provider" if ref.is_provider else "class",
        is_provider=ref.is_provider,
    )


class ClassExplorer:
    """Grow a graph by crawling class metadata from a provider."""

    def __init__(
        self,
        provider: ClassInfoProvider,
        max_depth: int = DEFAULT_MAX_DEPTH,
        child_depth: int = DEFAULT_CHILD_DEPTH,
        root_object: str = DEFAULT_ROOT_OBJECT,
        workers: int = DEFAULT_WORKERS,
    ):
        self.provider = provider
        self.max_depth = max_depth
        self.child_depth = child_depth
        self.root_object = normalize_name(root_object)
        self.workers = max(1, workers)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def explore(
        self,
        name: str,
        state: ExplorationState,
        graph: Optional[Graph] = None,
    ) -> Optional[Graph]:
        """Crawl from *name* and return the materialized graph.

        *graph* seeds the state so the result is a superset of it.  Returns
        None without fetching anything when *name* was already visited in
        *state* or the crawl was cancelled.

        Raises:
            InvalidInputError: *name* is empty or not a string.
            ProviderError: the root class could not be fetched or is unknown.
        """
        if not isinstance(name, str) or not name.strip():
            raise InvalidInputError(f"Invalid class name: {name!r}")
        name = normalize_name(name.strip())
        if state.is_visited(name) or state.depth > self.max_depth:
            return None

        if state.depth == 0 and graph is not None:
            state.seed(graph)

        branches = self._visit(name, state.depth, state)
        self._drain(branches, state)

        if state.cancelled.is_set():
            logger.debug("Crawl %d from %s cancelled before commit", state.generation, name)
            return None

        result = state.to_graph()
        logger.info(
            "Explored %s: %d classes fetched, %d nodes, %d links",
            name, len(state.visited), len(result), len(result.edges),
        )
        return result

    # ------------------------------------------------------------------
    # Work items
    # ------------------------------------------------------------------

    def _drain(self, branches: List[Branch], state: ExplorationState) -> None:
        if not branches:
            return
        with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="depgraph-crawl") as pool:
            pending: Set[Future] = {
                pool.submit(self._visit, child, depth, state) for child, depth in branches
            }
            while pending:
                done, pending = wait(pending, return_when=FIRST_COMPLETED)
                for future in done:
                    for child, depth in future.result():
                        pending.add(pool.submit(self._visit, child, depth, state))

    def _fetch(self, name: str, depth: int) -> Optional[ClassRecord]:
        try:
            record = self.provider.fetch_class_info(name)
        except ProviderError as exc:
            if depth == 0:
                raise
            logger.warning("Failed to fetch class info for %s: %s", name, exc)
            return None
        if record is None:
            if depth == 0:
                raise ProviderError(f"Class not found: {name}", name)
            logger.warning("Class info not found for %s", name)
        return record

    def _visit(self, name: str, depth: int, state: ExplorationState) -> List[Branch]:
        """Process one class and return the branches it opens."""
        if state.cancelled.is_set() or depth > self.max_depth:
            return []
        if not state.mark_visited(name):
            return []

        logger.debug("Fetching %s at depth %d", name, depth)
        record = self._fetch(name, depth)
        if record is None:
            return []

        node = record.to_node()
        node.node_id = node.full_name = name
        state.ensure_node(node)

        parent = record.parent_class
        if parent and parent != name and parent != self.root_object:
            state.ensure_node(Node(node_id=parent, node_type="class"))
            state.add_link(name, parent, "extends")

        branches: List[Branch] = []
        # References past the depth cap are neither fetched nor materialized.
        if depth + 1 <= self.max_depth:
            for attr, edge_type in _REF_EDGE_TYPES:
                refs: List[ClassRef] = getattr(record, attr)
                for ref in refs:
                    if ref.name == name:
                        continue
                    state.ensure_node(_ref_node(ref))
                    state.add_link(name, ref.name, edge_type)
                    branches.append((ref.name, depth + 1))

        if depth < self.child_depth:
            branches.extend(self._visit_children(name, depth, state))

        return branches

    def _visit_children(self, name: str, depth: int, state: ExplorationState) -> List[Branch]:
        try:
            children = self.provider.fetch_child_classes(name)
        except ProviderError as exc:
            logger.warning("Failed to fetch child classes for %s: %s", name, exc)
            return []

        branches: List[Branch] = []
        for child in children:
            if child.name == name:
                continue
            state.ensure_node(child.to_node())
            state.add_link(child.name, name, "extends")
            branches.append((child.name, depth + 1))
        return branches
