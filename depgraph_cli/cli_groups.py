"""Command groups for the DepGraph CLI.

  dg config   — provider connection and analysis settings
"""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from . import config_manager

console = Console()

# ── Configuration group ──────────────────────────────────────
config_grp = typer.Typer(
    help="⚙️  Configuration — class info provider and analysis settings.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


@config_grp.command("show")
def show_config():
    """Show the effective configuration."""
    table = Table(title="⚙️  Configuration", title_justify="left")
    table.add_column("Section", style="dim")
    table.add_column("Key", style="bold")
    table.add_column("Value")
    for section, values in (
        ("provider", config_manager.load_provider_config()),
        ("analysis", config_manager.load_analysis_config()),
    ):
        for key, value in values.items():
            table.add_row(section, key, str(value))
    console.print(table)


@config_grp.command("set-provider")
def set_provider(
    base_url: str = typer.Argument(..., help="Class info service base URL."),
    timeout: Optional[float] = typer.Option(None, min=0.1, help="Per-request timeout in seconds."),
    workers: Optional[int] = typer.Option(None, min=1, max=32, help="Concurrent fetches per crawl."),
):
    """Point the crawler at a class info service."""
    if not base_url.startswith(("http://", "https://")):
        raise typer.BadParameter("URL must start with http:// or https://")
    if not config_manager.save_config(base_url, timeout=timeout, workers=workers):
        typer.echo("❌ Could not write configuration.", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Provider set to {base_url.rstrip('/')}")


@config_grp.command("set")
def set_analysis(
    key: str = typer.Argument(..., help="Analysis setting, e.g. root_id or max_depth."),
    value: str = typer.Argument(..., help="New value."),
):
    """Change one analysis setting."""
    try:
        saved = config_manager.save_analysis_setting(key, value)
    except KeyError:
        known = ", ".join(config_manager.DEFAULT_CONFIG["analysis"])
        raise typer.BadParameter(f"Unknown setting '{key}'. Known: {known}")
    except ValueError:
        raise typer.BadParameter(f"Invalid value for {key}: {value!r}")
    if not saved:
        typer.echo("❌ Could not write configuration.", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Set {key} = {value}")


@config_grp.command("reset")
def reset():
    """Delete the config file and return to defaults."""
    if config_manager.reset_config():
        typer.echo("Configuration reset to defaults.")
    else:
        typer.echo("No configuration file to reset.")
