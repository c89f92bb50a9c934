"""Interactive graph navigator: focus, go back, explore and inspect."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.rule import Rule
from rich.table import Table

from . import config
from .analysis import filter_nodes_by_search
from .display import render_graph, render_issues, render_statistics
from .errors import DepGraphError
from .graph_export import export_json
from .models import ClassRecord, to_external_name
from .session import GraphSession

console = Console()

_COMMANDS = [
    ("show", "List visible nodes of the current graph"),
    ("focus <node>", "Show a node and its direct neighbours"),
    ("back", "Undo the last focus"),
    ("clear", "Leave focus mode and return to the full graph"),
    ("stats", "Show statistics for the current view"),
    ("issues", "Show detected issues for the current view"),
    ("search <text>", "List node ids containing text"),
    ("explore <class>", "Crawl a class hierarchy into the graph"),
    ("info <class>", "Show provider details for one class"),
    ("analyze", "Rebuild the graph from the provider's base classes"),
    ("export <file>", "Write the current view as JSON"),
    ("exit", "Leave the navigator"),
]


def _print_help() -> None:
    table = Table(show_header=False, box=None)
    table.add_column(style="yellow")
    table.add_column(style="dim")
    for cmd, desc in _COMMANDS:
        table.add_row(cmd, desc)
    console.print(table)


def _print_record(record: ClassRecord) -> None:
    table = Table(title=f"📦 {to_external_name(record.name)}", show_header=False, title_justify="left")
    table.add_column(style="dim")
    table.add_column()
    table.add_row("Provider", "yes" if record.is_provider else "no")
    table.add_row("Scope", record.scope)
    table.add_row("Parent", to_external_name(record.parent_class) if record.parent_class else "—")
    for label, refs in (("Parameters", record.parameters),
                        ("Components", record.components),
                        ("Injections", record.injections)):
        table.add_row(label, ", ".join(to_external_name(r.name) for r in refs) or "—")
    console.print(table)


def _prompt(session: GraphSession) -> str:
    focus = f" [magenta]{session.focused_node}[/magenta]" if session.focused_node else ""
    back = " [dim]↩[/dim]" if session.can_go_back else ""
    return f"  [blue]●[/blue]{focus}{back} [bold]›[/bold] "


def _handle(session: GraphSession, command: str, arg: str) -> bool:
    """Run one navigator command; returns False when the loop should end."""
    if command in {"exit", "quit"}:
        return False

    if command == "help":
        _print_help()
    elif command == "show":
        view = session.view()
        render_graph(console, view.graph, visible=view.visible_nodes, levels=view.levels)
    elif command == "focus":
        if not arg:
            console.print("  [red]Usage: focus <node>[/red]")
        else:
            view = session.focus(arg)
            console.print(f"  Focused on [bold]{arg}[/bold]: {len(view)} nodes, {len(view.edges)} links")
    elif command == "back":
        if session.back() is None:
            console.print("  [dim]Nothing to go back to.[/dim]")
        else:
            where = session.focused_node or "full graph"
            console.print(f"  Back to {where}.")
    elif command == "clear":
        session.clear_focus()
        console.print("  Showing the full graph.")
    elif command == "stats":
        render_statistics(console, session.statistics(), focused=session.focused_node)
    elif command == "issues":
        render_issues(console, session.issues())
    elif command == "search":
        matches = filter_nodes_by_search(session.graph, arg)
        console.print(f"  {len(matches)} match(es): {', '.join(matches) or '—'}")
    elif command == "explore":
        before = len(session.full_graph)
        session.explore(arg)
        full = session.full_graph
        console.print(f"  Explored {arg}: {len(full) - before} new nodes, {len(full.edges)} links")
    elif command == "info":
        record = session.class_info(arg)
        if record is None:
            console.print(f"  [yellow]No class info for {arg}.[/yellow]")
        else:
            _print_record(record)
    elif command == "analyze":
        graph = session.analyze_project()
        console.print(f"  Analyzed project: {len(graph)} nodes, {len(graph.edges)} links")
    elif command == "export":
        target = Path(arg or config.DEFAULT_EXPORT_NAME)
        export_json(session.graph, target)
        console.print(f"  Exported to {target}")
    else:
        console.print(f"  [red]Unknown command '{command}'. Type help.[/red]")
    return True


def run_navigator(session: GraphSession) -> None:
    console.print(Rule("🕸️  DepGraph navigator", style="cyan"))
    console.print("  [dim]Type [yellow]help[/yellow] for commands, [yellow]exit[/yellow] to quit[/dim]")
    while True:
        try:
            line = console.input(_prompt(session)).strip()
        except (EOFError, KeyboardInterrupt):
            console.print("\n  [dim]👋 Goodbye![/dim]")
            break
        if not line:
            continue
        command, _, arg = line.partition(" ")
        try:
            if not _handle(session, command.lower(), arg.strip()):
                console.print("  [dim]👋 Goodbye![/dim]")
                break
        except DepGraphError as exc:
            console.print(f"  [red]❌ {exc}[/red]")


def navigate(
    graph_file: Optional[Path] = typer.Argument(None, help="Graph JSON export (default: built-in sample)."),
    url: Optional[str] = typer.Option(None, "--url", "-u", help="Class info service base URL."),
    catalog: Optional[Path] = typer.Option(None, "--catalog", "-c", exists=True, dir_okay=False,
                                           help="Offline class catalog JSON."),
    offline: bool = typer.Option(False, "--offline", help="Do not connect to any provider."),
):
    """🧭 Interactive navigator with focus and undo."""
    from .cli import _open_session, load_graph

    graph = load_graph(graph_file)
    session = GraphSession(graph) if offline else _open_session(graph, url, catalog)
    try:
        run_navigator(session)
    finally:
        if session.provider is not None:
            session.provider.close()
