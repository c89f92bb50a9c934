"""Tests for the graph container and its data models."""

import logging

import pytest

from depgraph_cli.graph import Graph
from depgraph_cli.models import (
    ClassRecord,
    Edge,
    Node,
    normalize_name,
    resolve_node_ref,
    to_external_name,
)


class TestModels:
    """Test node, edge and class record models."""

    def test_normalize_name(self):
        assert normalize_name("com.example.Foo") == "com/example/Foo"
        assert to_external_name("com/example/Foo") == "com.example.Foo"

    def test_node_defaults(self):
        node = Node("Foo", node_type="widget", scope="forever")
        assert node.node_type == "class"
        assert node.scope == "module"
        assert node.full_name == "Foo"

    def test_provider_node_falls_back_to_provider_type(self):
        node = Node("Foo", node_type="bogus", is_provider=True)
        assert node.node_type == "provider"

    def test_node_dict_roundtrip_keeps_fields(self):
        node = Node("a/B", node_type="service", scope="singleton", full_name="a.B")
        restored = Node.from_dict(node.to_dict())
        assert restored == node

    def test_edge_alias_normalized(self):
        edge = Edge("A", "B", "inject")
        assert edge.edge_type == "injects"
        assert edge.key == ("A", "injects", "B")

    def test_edge_unknown_type_rejected(self):
        with pytest.raises(ValueError):
            Edge("A", "B", "owns")

    def test_resolve_node_ref(self):
        assert resolve_node_ref("A") == "A"
        assert resolve_node_ref({"id": "B", "x": 1}) == "B"
        assert resolve_node_ref(Node("C")) == "C"
        with pytest.raises(ValueError):
            resolve_node_ref(42)

    def test_class_record_from_payload_normalizes(self):
        record = ClassRecord.from_payload({
            "name": "com.app.Foo",
            "parent_class": "com.app.Base",
            "parameters": [{"name": "com.app.Bar"}, {"bogus": True}],
            "is_provider": True,
        })
        assert record.name == "com/app/Foo"
        assert record.parent_class == "com/app/Base"
        assert [r.name for r in record.parameters] == ["com/app/Bar"]
        assert record.to_node().node_type == "provider"

    def test_class_record_rejects_nameless_payload(self):
        assert ClassRecord.from_payload({"parameters": []}) is None
        assert ClassRecord.from_payload("nope") is None


class TestGraph:
    """Test node uniqueness, edge de-duplication and sanitizing."""

    def test_add_node_is_unique(self):
        graph = Graph()
        assert graph.add_node(Node("A")) is True
        assert graph.add_node(Node("A", node_type="service")) is False
        assert len(graph) == 1
        assert graph.get_node("A").node_type == "class"

    def test_add_edge_dedupes_by_composite_key(self):
        graph = Graph([Node("A"), Node("B")])
        assert graph.add_edge(Edge("A", "B", "depends")) is True
        assert graph.add_edge(Edge("A", "B", "depends")) is False
        assert graph.add_edge(Edge("A", "B", "injects")) is True
        assert len(graph.edges) == 2
        assert graph.has_edge("A", "B", "injects")

    def test_adjacency_preserves_insertion_order(self):
        graph = Graph(
            [Node("A"), Node("B"), Node("C")],
            [Edge("A", "C", "depends"), Edge("A", "B", "depends")],
        )
        assert graph.adjacency() == {"A": ["C", "B"], "B": [], "C": []}
        assert [e.dst for e in graph.outgoing("A")] == ["C", "B"]
        assert [e.src for e in graph.incoming("B")] == ["A"]

    def test_connected_node_ids(self):
        graph = Graph([Node("A"), Node("B"), Node("Lone")], [Edge("A", "B", "depends")])
        assert graph.connected_node_ids() == {"A", "B"}

    def test_sanitize_drops_dangling_edges(self, caplog):
        graph = Graph(
            [Node("A"), Node("B")],
            [Edge("A", "B", "depends"), Edge("A", "Ghost", "depends"), Edge("Ghost", "B", "injects")],
        )
        with caplog.at_level(logging.WARNING, logger="depgraph_cli.graph"):
            clean = graph.sanitize()

        assert [e.key for e in clean.edges] == [("A", "depends", "B")]
        assert len(graph.edges) == 3
        dropped = [r for r in caplog.records if "Dropping edge" in r.getMessage()]
        assert len(dropped) == 2

    def test_copy_is_independent(self):
        graph = Graph([Node("A")])
        clone = graph.copy()
        clone.add_node(Node("B"))
        assert "B" not in graph
        assert "B" in clone

    def test_from_dict_accepts_object_endpoints(self):
        graph = Graph.from_dict({
            "nodes": [{"id": "A"}, {"id": "B", "type": "service"}],
            "links": [
                {"source": {"id": "A"}, "target": {"id": "B"}, "type": "inject"},
                {"source": "B", "target": "A"},
            ],
        })
        assert graph.has_edge("A", "B", "injects")
        assert graph.has_edge("B", "A", "depends")
        assert graph.get_node("B").node_type == "service"

    def test_from_dict_sanitizes(self):
        graph = Graph.from_dict({
            "nodes": [{"id": "A"}],
            "links": [{"source": "A", "target": "Missing", "type": "depends"}],
        })
        assert graph.edges == []

    def test_to_dict_shape(self):
        graph = Graph([Node("A"), Node("B")], [Edge("A", "B", "provides")])
        payload = graph.to_dict()
        assert payload["links"] == [{"source": "A", "target": "B", "type": "provides"}]
        assert payload["nodes"][0]["id"] == "A"
        assert payload["nodes"][0]["isProvider"] is False
