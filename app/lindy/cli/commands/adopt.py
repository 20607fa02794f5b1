"""Adopt command implementation."""

from typing import Annotated

import typer

from lindy.cli.display import print_error_details
from lindy.cli.types import load_controller
from lindy.protocols.adopt import AdoptDone
from lindy.utils.formatting import print_success, print_warning


def adopt(
    block_id: Annotated[
        str,
        typer.Argument(help="Id of the marked block to take over."),
    ],
) -> None:
    """Take ownership of a marked block lindy did not create.

    Only the ownership record is written; the mount table and current
    mounts are left as they are.

    Example:
        lindy adopt k3j9x2ab
    """
    with load_controller() as controller:
        controller.refresh_blocks()
        block = controller.registry.find_by_id(block_id)
        if block is not None and block.managed:
            print_warning(f"Block {block_id} is already managed; rewriting its record.")

        outcome = controller.adopt(block_id)

    if isinstance(outcome, AdoptDone):
        print_success(f"Block {block_id} is now managed by lindy.")
        return

    print_error_details(outcome.details)
    raise typer.Exit(code=1)
