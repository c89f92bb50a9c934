"""In-memory dependency graph with node uniqueness and edge de-duplication.

Nodes are keyed by their normalized id; edges are keyed by the composite
``(src, edge_type, dst)`` tuple.  Both containers preserve insertion order so
that every algorithm run over the graph produces deterministic output.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set

from .models import Edge, EdgeKey, Node, resolve_node_ref

logger = logging.getLogger(__name__)


class Graph:
    """Canonical set of nodes and typed directed edges."""

    def __init__(
        self,
        nodes: Optional[Iterable[Node]] = None,
        edges: Optional[Iterable[Edge]] = None,
    ) -> None:
        self._nodes: Dict[str, Node] = {}
        self._edges: Dict[EdgeKey, Edge] = {}
        for node in nodes or ():
            self.add_node(node)
        for edge in edges or ():
            self.add_edge(edge)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_node(self, node: Node) -> bool:
        """Insert *node* unless its id is already present.

        Returns:
            True if the node was newly inserted.
        """
        if node.node_id in self._nodes:
            return False
        self._nodes[node.node_id] = node
        return True

    def add_edge(self, edge: Edge) -> bool:
        """Insert *edge* unless an edge with the same composite key exists.

        Endpoints are not checked here; :meth:`sanitize` drops dangling edges.
        """
        if edge.key in self._edges:
            return False
        self._edges[edge.key] = edge
        return True

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    @property
    def nodes(self) -> Dict[str, Node]:
        return self._nodes

    @property
    def edges(self) -> List[Edge]:
        return list(self._edges.values())

    def node_ids(self) -> List[str]:
        return list(self._nodes)

    def get_node(self, node_id: str) -> Optional[Node]:
        return self._nodes.get(node_id)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def has_edge(self, src: str, dst: str, edge_type: str) -> bool:
        return (src, edge_type, dst) in self._edges

    def outgoing(self, node_id: str) -> List[Edge]:
        return [e for e in self._edges.values() if e.src == node_id]

    def incoming(self, node_id: str) -> List[Edge]:
        return [e for e in self._edges.values() if e.dst == node_id]

    def adjacency(self) -> Dict[str, List[str]]:
        """Map each node id to its out-targets in edge insertion order."""
        adj: Dict[str, List[str]] = {node_id: [] for node_id in self._nodes}
        for edge in self._edges.values():
            adj.setdefault(edge.src, []).append(edge.dst)
        return adj

    def connected_node_ids(self) -> Set[str]:
        """Ids that appear as the source or target of at least one edge."""
        connected: Set[str] = set()
        for edge in self._edges.values():
            connected.add(edge.src)
            connected.add(edge.dst)
        return connected

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes.values())

    def __repr__(self) -> str:
        return f"Graph(nodes={len(self._nodes)}, edges={len(self._edges)})"

    # ------------------------------------------------------------------
    # Derived graphs
    # ------------------------------------------------------------------

    def copy(self) -> "Graph":
        return Graph(self._nodes.values(), self._edges.values())

    def sanitize(self) -> "Graph":
        """Return a copy holding only edges whose endpoints both exist.

        One warning is logged per dropped edge.
        """
        clean = Graph(self._nodes.values())
        for edge in self._edges.values():
            if edge.src not in self._nodes:
                logger.warning("Dropping edge %s -[%s]-> %s: source node not found",
                               edge.src, edge.edge_type, edge.dst)
                continue
            if edge.dst not in self._nodes:
                logger.warning("Dropping edge %s -[%s]-> %s: target node not found",
                               edge.src, edge.edge_type, edge.dst)
                continue
            clean.add_edge(edge)
        return clean

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self._nodes.values()],
            "links": [edge.to_dict() for edge in self._edges.values()],
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Graph":
        """Build a sanitized graph from a ``{nodes, links}`` document.

        Link endpoints may be id strings or objects carrying an ``id``.
        """
        graph = cls()
        for raw in payload.get("nodes", []):
            if not isinstance(raw, dict):
                raise TypeError(f"Node entry must be an object, got {raw!r}")
            graph.add_node(Node.from_dict(raw))
        for raw in payload.get("links", payload.get("edges", [])):
            if not isinstance(raw, dict):
                raise TypeError(f"Link entry must be an object, got {raw!r}")
            graph.add_edge(
                Edge(
                    src=resolve_node_ref(raw["source"]),
                    dst=resolve_node_ref(raw["target"]),
                    edge_type=raw.get("type", "depends"),
                )
            )
        return graph.sanitize()
