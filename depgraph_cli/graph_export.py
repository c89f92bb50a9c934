"""Graph export helpers for JSON documents and Graphviz DOT outputs."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict

from .analysis import detect_cycles
from .errors import GraphFormatError
from .focus import focused_subgraph
from .graph import Graph


def graph_to_document(graph: Graph) -> Dict[str, Any]:
    """Serialize *graph* to the exchange format consumed by renderers."""
    payload = graph.to_dict()
    payload["metadata"] = {
        "exportDate": datetime.now().isoformat(),
        "totalNodes": len(payload["nodes"]),
        "totalLinks": len(payload["links"]),
        "circularDependencies": len(detect_cycles(graph)),
    }
    return payload


def document_to_graph(payload: Any) -> Graph:
    """Parse an exchange document (``metadata`` is optional and ignored)."""
    if not isinstance(payload, dict) or not isinstance(payload.get("nodes"), list):
        raise GraphFormatError("Graph document must be an object with a 'nodes' list.")
    try:
        return Graph.from_dict(payload)
    except (KeyError, TypeError, ValueError) as exc:
        raise GraphFormatError(f"Malformed graph document: {exc}") from exc


def export_json(graph: Graph, output_file: Path) -> None:
    output_file.write_text(json.dumps(graph_to_document(graph), indent=2), encoding="utf-8")


def import_json(input_file: Path) -> Graph:
    try:
        payload = json.loads(Path(input_file).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise GraphFormatError(f"{input_file}: invalid JSON ({exc})") from exc
    return document_to_graph(payload)


def export_dot(graph: Graph, output_file: Path, focus: str = "") -> None:
    selected = focused_subgraph(graph, focus) if focus else graph
    circular = {frozenset(pair) for pair in detect_cycles(selected)}

    lines = ["digraph DependencyGraph {"]
    lines.append("  rankdir=LR;")

    for node in selected:
        label = f"{node.node_type}\\n{node.node_id}"
        lines.append(f'  "{_esc(node.node_id)}" [label="{_esc(label)}"];')

    for edge in selected.edges:
        style = ', color="red"' if frozenset((edge.src, edge.dst)) in circular else ""
        lines.append(
            f'  "{_esc(edge.src)}" -> "{_esc(edge.dst)}" [label="{edge.edge_type}"{style}];'
        )

    lines.append("}")
    output_file.write_text("\n".join(lines), encoding="utf-8")


def _esc(text: str) -> str:
    return text.replace('"', '\\"')
