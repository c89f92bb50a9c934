"""Per-graph session: current graph, crawls, focus navigation and views.

A session holds one current :class:`Graph` and is the only place that
replaces it.  Crawls are numbered; starting a new crawl supersedes any crawl
still in flight, and a superseded crawl's result is discarded at commit
time.  Commits and focus changes are serialized by one lock, so a reader
always sees a whole graph.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from . import config
from .analysis import (
    calculate_levels,
    calculate_statistics,
    detect_cycles,
    detect_issues,
    visible_node_ids,
)
from .errors import CrawlAbortedError, ProviderNotConfiguredError
from .explorer import ClassExplorer, ExplorationState
from .focus import FocusNavigator
from .graph import Graph
from .models import ClassRecord, Issue, Statistics, normalize_name
from .provider import ClassInfoProvider
from .transform import transform_base_classes

logger = logging.getLogger(__name__)


@dataclass
class GraphView:
    """Everything the presentation layer needs to draw the current state."""

    graph: Graph
    visible_nodes: List[str]
    statistics: Statistics
    issues: List[Issue]
    cycles: List[tuple]
    levels: Dict[str, int] = field(default_factory=dict)
    focused_node: Optional[str] = None
    can_go_back: bool = False


class GraphSession:
    """Owns the current graph for one analysis session."""

    def __init__(
        self,
        graph: Optional[Graph] = None,
        provider: Optional[ClassInfoProvider] = None,
        root_id: str = config.ROOT_ID,
        dependency_threshold: int = config.DEPENDENCY_THRESHOLD,
        max_depth: int = config.MAX_DEPTH,
        child_depth: int = config.CHILD_DEPTH,
        root_object: str = config.ROOT_OBJECT,
        workers: int = config.PROVIDER_WORKERS,
    ):
        start = (graph or Graph()).sanitize()
        self._graph = start
        self._full_graph = start
        self.provider = provider
        self.root_id = root_id
        self.dependency_threshold = dependency_threshold
        self.navigator = FocusNavigator()
        self.explorer = (
            ClassExplorer(
                provider,
                max_depth=max_depth,
                child_depth=child_depth,
                root_object=root_object,
                workers=workers,
            )
            if provider is not None
            else None
        )
        self._lock = threading.RLock()
        self._generation = 0
        self._active_state: Optional[ExplorationState] = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def graph(self) -> Graph:
        with self._lock:
            return self._graph

    @property
    def full_graph(self) -> Graph:
        with self._lock:
            return self._full_graph

    @property
    def focused_node(self) -> Optional[str]:
        return self.navigator.focused_node

    @property
    def can_go_back(self) -> bool:
        return self.navigator.can_go_back

    def load(self, graph: Graph) -> None:
        """Replace the graph wholesale and forget focus history."""
        clean = graph.sanitize()
        with self._lock:
            self._supersede()
            self._graph = clean
            self._full_graph = clean
            self.navigator.reset()

    # ------------------------------------------------------------------
    # Crawls
    # ------------------------------------------------------------------

    def _require_explorer(self) -> ClassExplorer:
        if self.explorer is None:
            raise ProviderNotConfiguredError("No class info provider configured for this session.")
        return self.explorer

    def _supersede(self) -> int:
        self._generation += 1
        if self._active_state is not None:
            self._active_state.cancelled.set()
            self._active_state = None
        return self._generation

    def _begin_crawl(self) -> ExplorationState:
        with self._lock:
            state = ExplorationState(generation=self._supersede())
            self._active_state = state
            return state

    def _commit(self, state: ExplorationState, graph: Graph, reset_focus: bool = False) -> None:
        """Install *graph* as the full graph.

        The focus state is read here, under the lock, so a focus or back
        made while the crawl ran is re-derived on the new graph instead of
        being overwritten.
        """
        with self._lock:
            if state.generation != self._generation:
                raise CrawlAbortedError(state.generation, self._generation)
            self._full_graph = graph
            if reset_focus:
                self.navigator.reset()
            view = self.navigator.rebase(graph)
            self._graph = view if view is not None else graph
            self._active_state = None
        logger.info("Committed crawl %d: %d nodes, %d links",
                    state.generation, len(graph), len(graph.edges))

    def analyze_project(self) -> Graph:
        """Rebuild the graph from the provider's base classes.

        Supersedes any in-flight crawl and clears focus history.  Raises
        :class:`~depgraph_cli.errors.ProviderError` if the listing fails.
        """
        explorer = self._require_explorer()
        state = self._begin_crawl()
        response = explorer.provider.fetch_base_classes()
        graph = transform_base_classes(response)
        try:
            self._commit(state, graph, reset_focus=True)
        except CrawlAbortedError as exc:
            logger.debug("Discarding project analysis: %s", exc)
        return self.graph

    def explore(self, name: str) -> Graph:
        """Crawl from *name*, growing the full graph in one atomic step.

        An active focus survives: its view is recomputed on the grown graph
        and ``back`` returns to the grown full graph.

        Raises:
            InvalidInputError: for an empty or malformed name.
            ProviderError: if the root class cannot be fetched.
        """
        explorer = self._require_explorer()
        state = self._begin_crawl()
        result = explorer.explore(name, state, graph=self.full_graph)
        if result is not None:
            try:
                self._commit(state, result)
            except CrawlAbortedError as exc:
                logger.debug("Discarding crawl from %s: %s", name, exc)
        return self.graph

    def class_info(self, name: str) -> Optional[ClassRecord]:
        """Fetch the detail record for one class without touching the graph."""
        explorer = self._require_explorer()
        return explorer.provider.fetch_class_info(normalize_name(name))

    # ------------------------------------------------------------------
    # Focus
    # ------------------------------------------------------------------

    def focus(self, node_id: str) -> Graph:
        with self._lock:
            view, _snapshot = self.navigator.focus(node_id, self._graph)
            self._graph = view
            return view

    def back(self) -> Optional[Graph]:
        with self._lock:
            restored = self.navigator.back()
            if restored is None:
                return None
            self._graph = restored
            return restored

    def clear_focus(self) -> Graph:
        with self._lock:
            if self.navigator.focused_node is None and not self.navigator.can_go_back:
                return self._graph
            self._graph = self.navigator.clear_focus(self._full_graph)
            return self._graph

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def statistics(self) -> Statistics:
        with self._lock:
            graph, focused = self._graph, self.navigator.focused_node
        return calculate_statistics(graph, focused)

    def issues(self) -> List[Issue]:
        with self._lock:
            graph, focused = self._graph, self.navigator.focused_node
        return detect_issues(graph, focused, root_id=self.root_id,
                             threshold=self.dependency_threshold)

    def view(self) -> GraphView:
        with self._lock:
            graph = self._graph
            focused = self.navigator.focused_node
            can_go_back = self.navigator.can_go_back
        return GraphView(
            graph=graph,
            visible_nodes=visible_node_ids(graph, focused),
            statistics=calculate_statistics(graph, focused),
            issues=detect_issues(graph, focused, root_id=self.root_id,
                                 threshold=self.dependency_threshold),
            cycles=detect_cycles(graph),
            levels=calculate_levels(graph),
            focused_node=focused,
            can_go_back=can_go_back,
        )


__all__ = ["GraphSession", "GraphView"]
