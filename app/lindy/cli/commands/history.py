"""History command for viewing past operations.

This module provides the `lindy history` command for viewing the
history of apply, adopt, remove and auto-map operations.
"""

import json
from datetime import datetime
from typing import Annotated

import typer
from rich.table import Table

from lindy.core.state import StateManager
from lindy.models.history import HistoryEntry
from lindy.utils.formatting import console, print_info

app = typer.Typer(
    name="history",
    help="View history of mount-table changes.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def history(
    ctx: typer.Context,
    limit: Annotated[
        int,
        typer.Option(
            "--limit",
            "-n",
            help="Maximum number of entries to show.",
        ),
    ] = 20,
    since: Annotated[
        str | None,
        typer.Option(
            "--since",
            help="Show entries since date (YYYY-MM-DD).",
        ),
    ] = None,
    block_id: Annotated[
        str | None,
        typer.Option(
            "--block",
            help="Only show entries for one block id.",
        ),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output as JSON.",
        ),
    ] = False,
) -> None:
    """Show history of mount-table changes.

    Each entry shows when an operation ran, which block and folders it
    touched, and whether it succeeded.

    Examples:
        lindy history              # Show last 20 entries
        lindy history -n 50        # Show last 50 entries
        lindy history --since 2026-01-01
        lindy history --block k3j9x2ab
        lindy history --json       # JSON output for scripting
    """
    if ctx.invoked_subcommand is not None:
        return

    state = StateManager()
    if block_id:
        entries = state.get_entries_for_block(block_id)[:limit]
    else:
        entries = state.get_history(limit=limit)

    if since:
        try:
            since_date = datetime.fromisoformat(since).strftime("%Y-%m-%d")
        except ValueError:
            typer.echo(f"Invalid date format: {since}. Use YYYY-MM-DD.", err=True)
            raise typer.Exit(code=1) from None
        entries = [e for e in entries if e.timestamp[:10] >= since_date]

    if not entries:
        print_info("No history entries found.")
        return

    if json_output:
        _print_json(entries)
    else:
        _print_table(entries)


def _print_table(entries: list[HistoryEntry]) -> None:
    """Print history as Rich table.

    Args:
        entries: List of history entries to display.
    """
    table = Table(title="Operation History", header_style="bold_header", border_style="border")
    table.add_column("ID", style="dim")
    table.add_column("Timestamp", style="info")
    table.add_column("Action", style="accent")
    table.add_column("Block", style="text")
    table.add_column("Folders", style="text")
    table.add_column("OK?")

    for entry in entries:
        folders = ", ".join(entry.targets[:3])
        if len(entry.targets) > 3:
            folders += f" (+{len(entry.targets) - 3} more)"

        table.add_row(
            entry.id[:8],
            _format_timestamp(entry.timestamp),
            entry.action_type.value,
            entry.block_id or "-",
            folders or "-",
            "[success]Yes[/]" if entry.success else "[error]No[/]",
        )

    console.print(table)


def _format_timestamp(iso_timestamp: str) -> str:
    """Format ISO timestamp as YYYY-MM-DD HH:MM."""
    dt = datetime.fromisoformat(iso_timestamp.replace("Z", "+00:00"))
    return dt.strftime("%Y-%m-%d %H:%M")


def _print_json(entries: list[HistoryEntry]) -> None:
    output = [entry.to_dict() for entry in entries]
    console.print(json.dumps(output, indent=2))
