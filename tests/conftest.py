"""Pytest configuration and fixtures for DepGraph CLI tests."""

import json
import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from depgraph_cli.graph import Graph
from depgraph_cli.models import Edge, Node
from depgraph_cli.provider import StaticClassInfoProvider
from depgraph_cli.sample_data import sample_graph


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path: Path, monkeypatch):
    """Point the config file at a temp location so tests never touch ~/.depgraph."""
    monkeypatch.setattr("depgraph_cli.config.CONFIG_FILE", tmp_path / "config.toml")


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


def make_graph(edges, extra_nodes=()) -> Graph:
    """Build a graph from ``(src, dst, type)`` triples plus optional lone nodes."""
    graph = Graph()
    for src, dst, _ in edges:
        graph.add_node(Node(src))
        graph.add_node(Node(dst))
    for node_id in extra_nodes:
        graph.add_node(Node(node_id))
    for src, dst, edge_type in edges:
        graph.add_edge(Edge(src, dst, edge_type))
    return graph


@pytest.fixture
def cycle_graph() -> Graph:
    """X -> Y -> Z -> X, all ``depends``."""
    return make_graph([("X", "Y", "depends"), ("Y", "Z", "depends"), ("Z", "X", "depends")])


@pytest.fixture
def sample() -> Graph:
    return sample_graph()


def _cls(name, parameters=(), components=(), injections=(), parent="java.lang.Object", **extra):
    payload = {
        "name": name,
        "parent_class": parent,
        "parameters": [{"name": p} for p in parameters],
        "components": [{"name": c} for c in components],
        "injections": [{"name": i} for i in injections],
    }
    payload.update(extra)
    return payload


@pytest.fixture
def chain_catalog():
    """A -> B -> ... -> G linked through constructor parameters."""
    names = ["A", "B", "C", "D", "E", "F", "G"]
    classes = [_cls(name, parameters=[nxt]) for name, nxt in zip(names, names[1:])]
    classes.append(_cls("G"))
    return classes


@pytest.fixture
def app_catalog():
    """A small DI application with dotted names, children and a provider."""
    return [
        _cls("com.app.AppComponent",
             parameters=["com.app.ApiClient"],
             components=["com.app.NetworkModule"],
             injections=["com.app.Logger"]),
        _cls("com.app.ApiClient", parameters=["com.app.Logger", "com.app.Config"]),
        _cls("com.app.NetworkModule", components=["com.app.ApiClient"], is_provider=True),
        _cls("com.app.Logger", injections=["com.app.Config"]),
        _cls("com.app.Config", parameters=["com.app.Logger"]),
        _cls("com.app.AuthClient", parent="com.app.ApiClient"),
    ]


@pytest.fixture
def static_provider(app_catalog) -> StaticClassInfoProvider:
    return StaticClassInfoProvider(app_catalog)


@pytest.fixture
def catalog_file(tmp_path: Path, app_catalog) -> Path:
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps({"classes": app_catalog}), encoding="utf-8")
    return path


@pytest.fixture
def chain_catalog_file(tmp_path: Path, chain_catalog) -> Path:
    path = tmp_path / "chain.json"
    path.write_text(json.dumps(chain_catalog), encoding="utf-8")
    return path
