"""Blocks command implementation.

Lists the marked blocks found in the mount table and whether lindy owns
them.
"""

import json
from typing import Annotated

import typer

from lindy.core.config import ConfigError, load_config
from lindy.core.executor import get_helper
from lindy.utils.formatting import (
    console,
    create_block_table,
    format_block_row,
    print_error,
    print_info,
)

app = typer.Typer(
    help="List marked mount-table blocks.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def blocks(
    ctx: typer.Context,
    managed_only: Annotated[
        bool,
        typer.Option(
            "--managed-only",
            help="Hide blocks without an ownership record.",
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
    """List marked blocks in the mount table.

    Managed blocks (with an ownership record) are shown with a filled
    circle; marked blocks lindy does not own yet can be taken over with
    'lindy adopt ID'.

    Examples:
        lindy blocks                 # All marked blocks
        lindy blocks --managed-only  # Only blocks lindy owns
        lindy blocks --json          # JSON output for scripting
    """
    if ctx.invoked_subcommand is not None:
        return

    try:
        found = get_helper(load_config()).list_blocks()
    except ConfigError as e:
        print_error(f"Invalid configuration: {e}")
        raise typer.Exit(code=1) from e

    if managed_only:
        found = [b for b in found if b.managed]

    if json_output:
        console.print(json.dumps([b.to_dict() for b in found], indent=2))
        return

    if not found:
        print_info("No marked blocks found.")
        return

    table = create_block_table()
    for block in found:
        table.add_row(*format_block_row(block))
    console.print(table)

    foreign = sum(1 for b in found if not b.managed)
    if foreign:
        print_info(f"{foreign} block(s) not managed yet. Use 'lindy adopt ID' to take them over.")
