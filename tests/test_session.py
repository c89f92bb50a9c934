"""Tests for focus navigation and session state."""

import threading

import pytest

from depgraph_cli.errors import (
    CrawlAbortedError,
    DepGraphError,
    NavigationError,
    ProviderNotConfiguredError,
)
from depgraph_cli.focus import FocusNavigator, focused_subgraph
from depgraph_cli.graph import Graph
from depgraph_cli.models import Node
from depgraph_cli.provider import StaticClassInfoProvider
from depgraph_cli.session import GraphSession

from conftest import _cls, make_graph


class BlockingProvider(StaticClassInfoProvider):
    """Static catalog whose first fetch waits until released."""

    def __init__(self, classes):
        super().__init__(classes)
        self.entered = threading.Event()
        self.release = threading.Event()

    def fetch_class_info(self, name):
        if not self.entered.is_set():
            self.entered.set()
            self.release.wait(timeout=5)
        return super().fetch_class_info(name)


class TestFocusedSubgraph:
    """Test one-hop focus views."""

    def test_focus_middle_of_cycle(self, cycle_graph):
        view = focused_subgraph(cycle_graph, "Y")
        assert set(view.node_ids()) == {"X", "Y", "Z"}
        assert sorted((e.src, e.dst) for e in view.edges) == [("X", "Y"), ("Y", "Z"), ("Z", "X")]

    def test_self_loop_dropped(self):
        graph = make_graph([("A", "A", "depends"), ("A", "B", "depends")])
        view = focused_subgraph(graph, "A")
        assert [(e.src, e.dst) for e in view.edges] == [("A", "B")]

    def test_unknown_node(self, cycle_graph):
        with pytest.raises(NavigationError):
            focused_subgraph(cycle_graph, "Nope")

    def test_isolated_focus_is_single_node(self):
        graph = make_graph([("A", "B", "depends")], extra_nodes=["Lone"])
        view = focused_subgraph(graph, "Lone")
        assert view.node_ids() == ["Lone"]
        assert view.edges == []


class TestFocusNavigator:
    """Test the single-slot undo."""

    def test_back_without_focus(self):
        assert FocusNavigator().back() is None

    def test_clear_with_pending_snapshot(self, cycle_graph):
        nav = FocusNavigator()
        nav.focus("Y", cycle_graph)
        with pytest.raises(NavigationError):
            nav.clear_focus(cycle_graph)


class TestGraphSessionFocus:
    """Test focus, back and clear through a session."""

    def test_focus_then_back(self, cycle_graph):
        session = GraphSession(cycle_graph)
        view = session.focus("Y")

        assert session.graph is view
        assert session.focused_node == "Y"
        assert session.can_go_back
        stats = session.statistics()
        assert stats.total_modules == 3
        assert stats.total_dependencies == 3

        restored = session.back()
        assert restored is session.graph
        assert len(restored.edges) == 3
        assert session.focused_node is None
        assert not session.can_go_back

    def test_single_slot_overwrite(self, cycle_graph):
        session = GraphSession(cycle_graph)
        y_view = session.focus("Y")
        session.focus("X")

        assert session.back() is y_view
        assert session.focused_node == "Y"
        assert session.back() is None
        assert session.focused_node == "Y"

    def test_clear_focus_after_back(self, cycle_graph):
        session = GraphSession(cycle_graph)
        session.focus("Y")
        session.focus("X")
        session.back()

        full = session.clear_focus()
        assert session.focused_node is None
        assert len(full.edges) == 3

    def test_clear_focus_while_pending(self, cycle_graph):
        session = GraphSession(cycle_graph)
        session.focus("Y")
        with pytest.raises(NavigationError):
            session.clear_focus()
        assert session.focused_node == "Y"

    def test_focus_issues_skip_isolated(self):
        graph = make_graph([("A", "B", "depends")], extra_nodes=["Lone"])
        session = GraphSession(graph)
        assert [i.title for i in session.issues()] == ["Isolated Component"]
        session.focus("A")
        assert session.issues() == []

    def test_view_bundle(self, sample):
        view = GraphSession(sample).view()
        assert len(view.visible_nodes) == 14
        assert view.statistics.circular_deps == 1
        assert view.cycles == [("LoggingService", "ConfigService")]
        assert view.focused_node is None
        assert not view.can_go_back


class TestGraphSessionCrawl:
    """Test exploration, project analysis and crawl supersession."""

    def test_explore_grows_graph(self, static_provider):
        session = GraphSession(Graph([Node("Existing")]), provider=static_provider)
        graph = session.explore("com.app.Logger")

        assert session.graph is graph
        assert "Existing" in graph
        assert graph.has_edge("com/app/Logger", "com/app/Config", "injects")

    def test_analyze_project_resets_focus(self, static_provider, sample):
        session = GraphSession(sample, provider=static_provider)
        session.focus("ApiClient")
        graph = session.analyze_project()

        assert "java/lang/Object" in graph
        assert graph.has_edge("com/app/ApiClient", "java/lang/Object", "extends")
        assert session.focused_node is None
        assert not session.can_go_back
        assert session.full_graph is graph

    def test_class_info(self, static_provider):
        session = GraphSession(provider=static_provider)
        record = session.class_info("com.app.ApiClient")
        assert record.name == "com/app/ApiClient"
        assert session.class_info("com.app.Missing") is None

    def test_crawl_without_provider(self):
        session = GraphSession()
        with pytest.raises(ProviderNotConfiguredError):
            session.explore("A")
        with pytest.raises(DepGraphError):
            session.class_info("A")

    def test_stale_commit_rejected(self):
        session = GraphSession()
        first = session._begin_crawl()
        session._begin_crawl()

        assert first.cancelled.is_set()
        with pytest.raises(CrawlAbortedError):
            session._commit(first, Graph([Node("Stale")]))
        assert "Stale" not in session.graph

    def test_superseded_crawl_is_discarded(self, chain_catalog):
        provider = BlockingProvider(chain_catalog)
        session = GraphSession(provider=provider)
        replacement = Graph([Node("Loaded")])

        worker = threading.Thread(target=session.explore, args=("A",))
        worker.start()
        assert provider.entered.wait(timeout=5)
        session.load(replacement)
        provider.release.set()
        worker.join(timeout=5)

        assert not worker.is_alive()
        assert session.graph.node_ids() == ["Loaded"]


class TestCrawlWhileFocused:
    """Test that crawls and focus navigation compose."""

    CATALOG = [_cls("New", parameters=["Y"]), _cls("Y")]

    def test_explore_while_focused_then_back(self, cycle_graph):
        session = GraphSession(cycle_graph, provider=StaticClassInfoProvider(self.CATALOG))
        session.focus("Y")
        session.explore("New")

        assert session.focused_node == "Y"
        assert session.can_go_back
        assert set(session.graph.node_ids()) == {"X", "Y", "Z", "New"}
        assert session.graph.has_edge("New", "Y", "depends")
        assert "New" in session.full_graph

        restored = session.back()
        assert restored is session.full_graph
        assert "New" in session.graph
        assert len(session.graph.edges) == 4
        assert session.focused_node is None

    def test_explore_while_focused_elsewhere(self):
        graph = make_graph([("X", "Y", "depends")], extra_nodes=["Far"])
        session = GraphSession(graph, provider=StaticClassInfoProvider(self.CATALOG))
        session.focus("Far")
        session.explore("New")

        assert session.graph.node_ids() == ["Far"]
        session.back()
        assert session.graph.has_edge("New", "Y", "depends")

    def test_focus_during_crawl_survives_commit(self, cycle_graph):
        provider = BlockingProvider(self.CATALOG)
        session = GraphSession(cycle_graph, provider=provider)

        worker = threading.Thread(target=session.explore, args=("New",))
        worker.start()
        assert provider.entered.wait(timeout=5)
        session.focus("Y")
        provider.release.set()
        worker.join(timeout=5)

        assert not worker.is_alive()
        assert session.focused_node == "Y"
        assert "New" in session.graph
        assert "New" in session.full_graph
        session.back()
        assert session.focused_node is None
        assert session.graph.has_edge("New", "Y", "depends")
        assert session.graph.has_edge("Z", "X", "depends")

    def test_back_during_crawl_is_not_overwritten(self, cycle_graph):
        provider = BlockingProvider(self.CATALOG)
        session = GraphSession(cycle_graph, provider=provider)
        session.focus("Y")

        worker = threading.Thread(target=session.explore, args=("New",))
        worker.start()
        assert provider.entered.wait(timeout=5)
        session.back()
        provider.release.set()
        worker.join(timeout=5)

        assert session.focused_node is None
        assert not session.can_go_back
        assert session.graph is session.full_graph
        assert "New" in session.graph
