"""Apply command implementation.

Writes the folder mappings as one managed block to the mount table and
mounts it.
"""

from typing import Annotated

import typer

from lindy.cli.display import print_error_details, print_manual_command, print_preview
from lindy.cli.types import (
    BaseOption,
    MapOption,
    SkipPartitionOption,
    UuidOption,
    configure_session,
    load_controller,
)
from lindy.core.controller import MountController
from lindy.protocols.adopt import AdoptDone
from lindy.protocols.apply import (
    ApplyAdoptionOffered,
    ApplyDone,
    ApplyFailed,
    ApplyOutcome,
    ApplyRejected,
)
from lindy.utils.formatting import print_error, print_info, print_success

app = typer.Typer(
    help="Write folder mappings to the mount table.",
    invoke_without_command=True,
)


def handle_apply_outcome(controller: MountController, outcome: ApplyOutcome, adopt: bool) -> None:
    """Report an apply outcome and follow up on an adoption offer.

    Args:
        controller: Controller that produced the outcome.
        outcome: Outcome of the apply.
        adopt: Adopt an existing block without asking.

    Raises:
        typer.Exit: With code 1 if the block was not written or adopted.
    """
    if isinstance(outcome, ApplyDone):
        print_success(f"Block {outcome.request.id} applied: {', '.join(outcome.request.targets)}")
        return

    if isinstance(outcome, ApplyRejected):
        print_error(outcome.reason)
        raise typer.Exit(code=1)

    if isinstance(outcome, ApplyAdoptionOffered):
        candidate = outcome.candidate
        print_info(f"These folders are already bound by block {candidate.id}.")
        if not adopt and not typer.confirm("Let lindy manage the existing block?", default=True):
            print_info("Nothing changed.")
            raise typer.Exit(code=1)
        adopted = controller.adopt(candidate)
        if isinstance(adopted, AdoptDone):
            print_success(f"Block {candidate.id} is now managed by lindy.")
            return
        print_error_details(adopted.details)
        raise typer.Exit(code=1)

    if isinstance(outcome, ApplyFailed):
        print_error_details(outcome.details)
        if outcome.manual_command:
            print_manual_command(outcome.manual_command)
        raise typer.Exit(code=1)


@app.callback(invoke_without_command=True)
def apply(
    ctx: typer.Context,
    maps: MapOption = None,
    uuid: UuidOption = None,
    base: BaseOption = None,
    skip_partition: SkipPartitionOption = False,
    yes: Annotated[
        bool,
        typer.Option(
            "--yes",
            "-y",
            help="Skip confirmation prompt and proceed.",
        ),
    ] = False,
    adopt: Annotated[
        bool,
        typer.Option(
            "--adopt",
            help="Adopt an existing block for the same folders without asking.",
        ),
    ] = False,
) -> None:
    """Bind-mount folders by adding one managed block to /etc/fstab.

    All mappings go into a single block together with an optional device
    line for the partition. The change needs administrator rights and is
    made in one privileged step.

    Examples:
        lindy apply -u <UUID> -b /mnt/windows \\
            -m /mnt/windows/Users/bob/Documents:/home/bob/Documents
        lindy apply --skip-partition -m /mnt/data/Music:/home/bob/Music --yes
    """
    if ctx.invoked_subcommand is not None:
        return

    if not maps:
        print_error("No mappings given. Use --map SRC:TARGET.")
        raise typer.Exit(code=1)

    with load_controller() as controller:
        controller.refresh_partitions()
        controller.refresh_blocks()
        configure_session(controller, maps, uuid, base, skip_partition)

        lines = controller.preview()
        if not lines:
            print_error("Nothing to apply. Check the base mount and the partition UUID.")
            raise typer.Exit(code=1)

        print_preview(lines)
        if not yes and not typer.confirm("\nAppend these lines to the mount table?", default=False):
            print_info("Aborted.")
            raise typer.Exit(code=0)

        handle_apply_outcome(controller, controller.apply(), adopt)
