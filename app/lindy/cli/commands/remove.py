"""Remove command implementation.

Unmounts a managed block and deletes it from the mount table. A busy
mount is only force-unmounted after explicit confirmation.
"""

from typing import Annotated

import typer

from lindy.cli.display import print_error_details, print_manual_command
from lindy.cli.types import load_controller
from lindy.protocols.remove import (
    RemovalBusyRetryOffered,
    RemovalDone,
    RemovalFailed,
    RemovalRejected,
)
from lindy.utils.formatting import print_error, print_info, print_success, print_warning

app = typer.Typer(
    help="Unmount and remove a managed block.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def remove(
    ctx: typer.Context,
    target: Annotated[
        str | None,
        typer.Option(
            "--target",
            "-t",
            help="Bind target whose block should be removed.",
        ),
    ] = None,
    block_id: Annotated[
        str | None,
        typer.Option(
            "--id",
            help="Id of the block to remove.",
        ),
    ] = None,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Lazily unmount busy folders instead of stopping.",
        ),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option(
            "--yes",
            "-y",
            help="Skip confirmation prompts.",
        ),
    ] = False,
) -> None:
    """Remove a managed block by bind target or by id.

    The block's mounts are unmounted first. If a folder is in use the
    removal stops and offers a forced (lazy) unmount instead.

    Examples:
        lindy remove --target /home/bob/Documents
        lindy remove --id k3j9x2ab --force
    """
    if ctx.invoked_subcommand is not None:
        return

    if not target and not block_id:
        print_error("Pass --target or --id.")
        raise typer.Exit(code=1)

    with load_controller() as controller:
        controller.refresh_blocks()
        block = (
            controller.registry.find_by_target(target)
            if target
            else controller.registry.find_by_id(block_id or "")
        )
        if block is not None and not block.managed:
            print_warning(f"Block {block.id} is not managed by lindy. Adopt it first to remove it.")
            raise typer.Exit(code=1)

        subject = target or block_id
        if not yes and not typer.confirm(f"Unmount and remove the block for {subject}?", default=False):
            print_info("Aborted.")
            raise typer.Exit(code=0)

        outcome = controller.remove(target=target, block_id=block_id, force=force)

        if isinstance(outcome, RemovalBusyRetryOffered):
            print_warning(outcome.hint)
            if yes or not typer.confirm("Unmount lazily and remove anyway?", default=False):
                print_info("Nothing removed. Close the programs using the folder or pass --force.")
                raise typer.Exit(code=1)
            outcome = controller.retry_with_force(outcome)

    if isinstance(outcome, RemovalDone):
        targets = outcome.result.targets or ((target,) if target else ())
        suffix = f": {', '.join(targets)}" if targets else ""
        removed_id = outcome.result.block_id or block_id
        label = f"Block {removed_id}" if removed_id else "Block"
        print_success(f"{label} removed{suffix}")
        return

    if isinstance(outcome, RemovalRejected):
        print_error(outcome.reason)
        raise typer.Exit(code=1)

    if isinstance(outcome, RemovalFailed):
        print_error_details(outcome.details)
        if outcome.manual_command:
            print_manual_command(outcome.manual_command)
        raise typer.Exit(code=1)
