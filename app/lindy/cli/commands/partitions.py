"""Partitions command implementation.

Lists block devices as reported by lsblk.
"""

import json
from typing import Annotated

import typer

from lindy.core.config import ConfigError, load_config
from lindy.core.executor import get_helper
from lindy.utils.formatting import (
    console,
    create_partition_table,
    format_partition_row,
    print_error,
    print_info,
)

app = typer.Typer(
    help="List block devices.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def partitions(
    ctx: typer.Context,
    windows_only: Annotated[
        bool,
        typer.Option(
            "--windows",
            "-w",
            help="Only show NTFS and exFAT partitions.",
        ),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output as JSON.",
        ),
    ] = False,
) -> None:
    """List block devices with their filesystem, label and UUID.

    Examples:
        lindy partitions            # All block devices
        lindy partitions --windows  # Only Windows partitions
        lindy partitions --json     # JSON output for scripting
    """
    if ctx.invoked_subcommand is not None:
        return

    try:
        helper = get_helper(load_config())
        found = helper.list_partitions()
    except ConfigError as e:
        print_error(f"Invalid configuration: {e}")
        raise typer.Exit(code=1) from e
    except RuntimeError as e:
        print_error(f"Could not list partitions: {e}")
        raise typer.Exit(code=1) from e

    if windows_only:
        found = [p for p in found if p.is_windows]

    if json_output:
        console.print(json.dumps([p.to_dict() for p in found], indent=2))
        return

    if not found:
        print_info("No partitions found.")
        return

    table = create_partition_table("Windows Partitions" if windows_only else "Partitions")
    for partition in found:
        table.add_row(*format_partition_row(partition))
    console.print(table)
