"""Rich renderers for graphs, statistics and issues."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from rich.console import Console
from rich.table import Table

from .graph import Graph
from .models import Issue, Statistics

_SEVERITY_STYLE = {"error": "red", "warning": "yellow", "info": "cyan"}
_SEVERITY_ICON = {"error": "✖", "warning": "⚠", "info": "ℹ"}


def render_statistics(console: Console, stats: Statistics, focused: Optional[str] = None) -> None:
    title = "📊 Statistics" + (f" — focused on {focused}" if focused else "")
    table = Table(title=title, show_header=False, title_justify="left")
    table.add_column("Metric", style="dim")
    table.add_column("Value", style="bold")
    table.add_row("Modules", str(stats.total_modules))
    table.add_row("Dependencies", str(stats.total_dependencies))
    table.add_row("Circular", f"[red]{stats.circular_deps}[/red]" if stats.circular_deps else "0")
    table.add_row("Max depth", str(stats.max_depth))
    table.add_row("Avg deps", f"{stats.avg_deps:g}")
    console.print(table)


def render_issues(console: Console, issues: List[Issue]) -> None:
    if not issues:
        console.print("[green]No issues detected.[/green]")
        return
    for issue in issues:
        style = _SEVERITY_STYLE.get(issue.severity, "white")
        icon = _SEVERITY_ICON.get(issue.severity, "•")
        console.print(f"[{style}]{icon} {issue.title}[/{style}]: {issue.description}")


def render_graph(
    console: Console,
    graph: Graph,
    visible: Optional[Iterable[str]] = None,
    levels: Optional[Dict[str, int]] = None,
    highlight: Optional[Iterable[str]] = None,
) -> None:
    shown = set(visible) if visible is not None else set(graph.node_ids())
    marked = set(highlight or ())
    table = Table(title=f"🔗 {len(shown)} nodes, {len(graph.edges)} links", title_justify="left")
    table.add_column("Node", style="bold")
    table.add_column("Type")
    table.add_column("Scope", style="dim")
    if levels is not None:
        table.add_column("Level", justify="right")
    table.add_column("Depends on")

    for node in graph:
        if node.node_id not in shown:
            continue
        targets = ", ".join(f"{e.dst} ({e.edge_type})" for e in graph.outgoing(node.node_id))
        name = f"[reverse]{node.node_id}[/reverse]" if node.node_id in marked else node.node_id
        row = [name, node.node_type, node.scope]
        if levels is not None:
            row.append(str(levels.get(node.node_id, 0)))
        row.append(targets or "[dim]—[/dim]")
        table.add_row(*row)
    console.print(table)


def render_cycles(console: Console, pairs: List[tuple]) -> None:
    if not pairs:
        console.print("[green]No circular dependencies.[/green]")
        return
    table = Table(title=f"🔁 {len(pairs)} circular links", title_justify="left")
    table.add_column("From", style="red")
    table.add_column("To", style="red")
    for src, dst in pairs:
        table.add_row(src, dst)
    console.print(table)


def render_levels(console: Console, levels: Dict[str, int]) -> None:
    table = Table(title="🪜 Dependency levels", title_justify="left")
    table.add_column("Level", justify="right")
    table.add_column("Nodes")
    by_level: Dict[int, List[str]] = {}
    for node_id, level in levels.items():
        by_level.setdefault(level, []).append(node_id)
    for level in sorted(by_level, reverse=True):
        table.add_row(str(level), ", ".join(by_level[level]))
    console.print(table)
