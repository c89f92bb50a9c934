"""Turn a provider's base-classes listing into an initial dependency graph."""

from __future__ import annotations

import logging
from typing import List

from .graph import Graph
from .models import BaseClassesResponse, ClassRef, Edge, Node

logger = logging.getLogger(__name__)

_REF_EDGE_TYPES = (
    ("parameters", "depends"),
    ("components", "provides"),
    ("injections", "injects"),
)


def _ref_node(ref: ClassRef) -> Node:
    return Node(
        node_id=ref.name,
        node_type="provider" if ref.is_provider else "class",
        is_provider=ref.is_provider,
    )


def transform_base_classes(response: BaseClassesResponse) -> Graph:
    """Build a graph from base-class records.

    The shared parent class always gets a node.  Each record contributes an
    ``extends`` edge to the shared parent, an ``extends`` edge to its own
    ``parent_class`` when that differs, a ``provides`` edge from its
    ``provider_class``, and one edge per parameter, component and injection.
    """
    graph = Graph()
    parent = response.parent_class
    graph.add_node(Node(node_id=parent, node_type="class", scope="module"))

    for record in response.records:
        class_name = record.name
        graph.add_node(record.to_node())

        if parent and parent != class_name:
            graph.add_edge(Edge(class_name, parent, "extends"))

        specific = record.parent_class
        if specific and specific != class_name and specific != parent:
            graph.add_node(Node(node_id=specific, node_type="class"))
            graph.add_edge(Edge(class_name, specific, "extends"))

        provider = record.provider_class
        if provider and provider != class_name:
            graph.add_node(Node(node_id=provider, node_type="provider", is_provider=True))
            graph.add_edge(Edge(provider, class_name, "provides"))

        for attr, edge_type in _REF_EDGE_TYPES:
            refs: List[ClassRef] = getattr(record, attr)
            for ref in refs:
                if ref.name == class_name:
                    continue
                graph.add_node(_ref_node(ref))
                graph.add_edge(Edge(class_name, ref.name, edge_type))

    clean = graph.sanitize()
    logger.info(
        "Transformed %d base classes into %d nodes and %d links",
        len(response.records), len(clean), len(clean.edges),
    )
    return clean
