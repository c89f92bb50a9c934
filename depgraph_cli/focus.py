"""Focus views: one-hop induced subgraphs with a single-slot undo."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .errors import NavigationError
from .graph import Graph


@dataclass
class FocusSnapshot:
    saved_graph: Graph
    saved_focused_node: Optional[str] = None


def focused_subgraph(graph: Graph, node_id: str) -> Graph:
    """Return the subgraph induced by *node_id* and its one-hop neighbours.

    Every edge between two selected nodes is kept, so neighbours that
    depend on each other stay linked.  Self-referential edges are dropped.
    """
    if node_id not in graph:
        raise NavigationError(f"Node '{node_id}' is not in the graph.")

    node_subset = {node_id}
    for edge in graph.edges:
        if edge.src == node_id:
            node_subset.add(edge.dst)
        elif edge.dst == node_id:
            node_subset.add(edge.src)

    edge_subset = [
        e for e in graph.edges
        if e.src in node_subset and e.dst in node_subset and e.src != e.dst
    ]
    nodes = [node for node in graph if node.node_id in node_subset]
    return Graph(nodes, edge_subset)


class FocusNavigator:
    """Track the active focus and the graph to return to."""

    def __init__(self) -> None:
        self.focused_node: Optional[str] = None
        self._snapshot: Optional[FocusSnapshot] = None

    @property
    def can_go_back(self) -> bool:
        return self._snapshot is not None

    def focus(self, node_id: str, current_graph: Graph) -> Tuple[Graph, FocusSnapshot]:
        """Focus on *node_id*, overwriting any pending snapshot."""
        view = focused_subgraph(current_graph, node_id)
        snapshot = FocusSnapshot(saved_graph=current_graph, saved_focused_node=self.focused_node)
        self._snapshot = snapshot
        self.focused_node = node_id
        return view, snapshot

    def back(self) -> Optional[Graph]:
        """Restore the snapshot graph and its focus; None if nothing is saved."""
        snapshot = self._snapshot
        if snapshot is None:
            return None
        self._snapshot = None
        self.focused_node = snapshot.saved_focused_node
        return snapshot.saved_graph

    def clear_focus(self, full_graph: Graph) -> Graph:
        """Drop the focus marker and return *full_graph*.

        Raises:
            NavigationError: while a snapshot is pending; use :meth:`back`.
        """
        if self._snapshot is not None:
            raise NavigationError("A focus snapshot is pending; go back first.")
        self.focused_node = None
        return full_graph

    def rebase(self, full_graph: Graph) -> Optional[Graph]:
        """Re-derive the active focus from a grown *full_graph*.

        Returns the new focus view, or None when no focus is active.  The
        undo slot is pointed at *full_graph*, so nested focus history
        collapses to a single step back to the whole graph.
        """
        if self.focused_node is None:
            self._snapshot = None
            return None
        if self.focused_node not in full_graph:
            self.reset()
            return None
        view = focused_subgraph(full_graph, self.focused_node)
        self._snapshot = FocusSnapshot(saved_graph=full_graph, saved_focused_node=None)
        return view

    def reset(self) -> None:
        self.focused_node = None
        self._snapshot = None
