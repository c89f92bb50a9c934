"""Typer-based CLI for DepGraph dependency analysis."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from . import __version__, config
from .analysis import calculate_levels, detect_cycles, filter_nodes_by_search, visible_node_ids
from .cli_groups import config_grp
from .cli_navigate import navigate
from .display import render_cycles, render_graph, render_issues, render_levels, render_statistics
from .errors import DepGraphError, GraphFormatError, InvalidInputError, NavigationError, ProviderError
from .graph import Graph
from .graph_export import export_dot, export_json, import_json
from .provider import build_provider
from .sample_data import sample_graph
from .session import GraphSession

console = Console()

app = typer.Typer(
    help="🕸️  DepGraph CLI — dependency graph analysis and class-hierarchy exploration.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(config_grp, name="config")
app.command("navigate")(navigate)


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"DepGraph CLI v{__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Log crawl progress to stderr."),
):
    """DepGraph CLI: find cycles, depth and coupling problems in component graphs."""
    _configure_logging(verbose)


# ===================================================================
# Helpers
# ===================================================================


def load_graph(graph_file: Optional[Path]) -> Graph:
    """Read a graph export, or the built-in sample when no file is given."""
    if graph_file is None:
        return sample_graph()
    if not graph_file.exists():
        raise typer.BadParameter(f"Graph file '{graph_file}' does not exist.")
    try:
        return import_json(graph_file)
    except GraphFormatError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _open_session(
    graph: Graph,
    url: Optional[str],
    catalog: Optional[Path],
    max_depth: Optional[int] = None,
    workers: Optional[int] = None,
) -> GraphSession:
    try:
        provider = build_provider(url=url, catalog=catalog)
    except ProviderError as exc:
        raise typer.BadParameter(str(exc)) from exc
    return GraphSession(
        graph,
        provider=provider,
        max_depth=max_depth if max_depth is not None else config.MAX_DEPTH,
        workers=workers if workers is not None else config.PROVIDER_WORKERS,
    )


GRAPH_ARG = typer.Argument(None, help="Graph JSON export (default: built-in sample).")
URL_OPT = typer.Option(None, "--url", "-u", help="Class info service base URL.")
CATALOG_OPT = typer.Option(None, "--catalog", "-c", exists=True, dir_okay=False,
                           help="Offline class catalog JSON instead of the service.")


# ===================================================================
# Commands
# ===================================================================


@app.command("analyze")
def analyze(
    url: Optional[str] = URL_OPT,
    catalog: Optional[Path] = CATALOG_OPT,
    output: Path = typer.Option(Path(config.DEFAULT_EXPORT_NAME), "--output", "-o",
                                help="Where to write the graph JSON."),
):
    """Build a graph from the provider's base classes."""
    session = _open_session(Graph(), url, catalog)
    try:
        graph = session.analyze_project()
    except ProviderError as exc:
        typer.echo(f"❌ Failed to analyze project: {exc}", err=True)
        raise typer.Exit(code=1)
    finally:
        session.provider.close()

    export_json(graph, output)
    typer.echo(f"Analyzed project into {output}")
    typer.echo(f"Nodes: {len(graph)} | Links: {len(graph.edges)}")


@app.command("explore")
def explore(
    name: str = typer.Argument(..., help="Class to crawl from (dotted or slashed)."),
    graph_file: Optional[Path] = typer.Option(None, "--graph", "-g",
                                              help="Existing graph JSON to extend."),
    url: Optional[str] = URL_OPT,
    catalog: Optional[Path] = CATALOG_OPT,
    output: Optional[Path] = typer.Option(None, "--output", "-o",
                                          help="Output file (default: --graph or dependency-graph.json)."),
    max_depth: int = typer.Option(config.MAX_DEPTH, min=0, max=20, help="Crawl depth cap."),
    workers: int = typer.Option(config.PROVIDER_WORKERS, min=1, max=32, help="Concurrent fetches."),
):
    """Crawl the class hierarchy from NAME and merge it into the graph."""
    graph = load_graph(graph_file) if graph_file else Graph()
    session = _open_session(graph, url, catalog, max_depth=max_depth, workers=workers)
    before = len(graph)
    try:
        result = session.explore(name)
    except InvalidInputError as exc:
        raise typer.BadParameter(str(exc)) from exc
    except ProviderError as exc:
        typer.echo(f"❌ Failed to explore class hierarchy: {exc}", err=True)
        raise typer.Exit(code=1)
    finally:
        session.provider.close()

    target = output or graph_file or Path(config.DEFAULT_EXPORT_NAME)
    export_json(result, target)
    typer.echo(f"Explored '{name}': {len(result) - before} new nodes.")
    typer.echo(f"Nodes: {len(result)} | Links: {len(result.edges)} -> {target}")


@app.command("show")
def show(
    graph_file: Optional[Path] = GRAPH_ARG,
    search: str = typer.Option("", "--search", "-s", help="Highlight ids containing this text."),
    show_all: bool = typer.Option(False, "--all", help="Include isolated nodes."),
):
    """List nodes with their outgoing links."""
    graph = load_graph(graph_file)
    visible = graph.node_ids() if show_all else visible_node_ids(graph)
    matches = filter_nodes_by_search(graph, search) if search else []
    render_graph(console, graph, visible=visible, levels=calculate_levels(graph), highlight=matches)
    if search:
        typer.echo(f"{len(matches)} node(s) match '{search}'.")


@app.command("stats")
def stats(graph_file: Optional[Path] = GRAPH_ARG):
    """Show module, dependency, cycle and depth statistics."""
    session = GraphSession(load_graph(graph_file))
    render_statistics(console, session.statistics())


@app.command("issues")
def issues(graph_file: Optional[Path] = GRAPH_ARG):
    """Report circular dependencies, high coupling and isolated components."""
    session = GraphSession(load_graph(graph_file))
    found = session.issues()
    render_issues(console, found)
    if any(issue.severity == "error" for issue in found):
        raise typer.Exit(code=1)


@app.command("cycles")
def cycles(graph_file: Optional[Path] = GRAPH_ARG):
    """List links that lie on a dependency cycle."""
    render_cycles(console, detect_cycles(load_graph(graph_file)))


@app.command("levels")
def levels(graph_file: Optional[Path] = GRAPH_ARG):
    """Show the dependency level of every node."""
    render_levels(console, calculate_levels(load_graph(graph_file)))


@app.command("focus")
def focus(
    node: str = typer.Argument(..., help="Node id to focus on."),
    graph_file: Optional[Path] = GRAPH_ARG,
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the focus view as JSON."),
):
    """Show NODE with its direct neighbours only."""
    session = GraphSession(load_graph(graph_file))
    try:
        view = session.focus(node)
    except NavigationError as exc:
        typer.echo(f"❌ {exc}", err=True)
        raise typer.Exit(code=1)

    render_graph(console, view, highlight=[node])
    render_statistics(console, session.statistics(), focused=node)
    if output is not None:
        export_json(view, output)
        typer.echo(f"Exported focus view to {output}")


@app.command("export")
def export(
    graph_file: Optional[Path] = GRAPH_ARG,
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file path."),
    fmt: str = typer.Option("json", "--format", "-f", help="Export format: json or dot."),
    focus_node: str = typer.Option("", "--focus", help="Only export this node's neighbourhood."),
):
    """Export the graph to JSON or Graphviz DOT."""
    fmt = fmt.lower()
    if fmt not in {"json", "dot"}:
        raise typer.BadParameter("Format must be one of: json, dot")

    graph = load_graph(graph_file)
    if output is None:
        output = Path.cwd() / f"dependency-graph.{fmt}"

    try:
        if fmt == "json":
            session = GraphSession(graph)
            export_json(session.focus(focus_node) if focus_node else graph, output)
        else:
            export_dot(graph, output, focus=focus_node)
    except DepGraphError as exc:
        typer.echo(f"❌ {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"Exported graph to {output}")


if __name__ == "__main__":
    app()
