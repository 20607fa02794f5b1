"""Auto-map commands.

Pairs the standard folders of a Windows profile (Documents, Pictures, ...)
with their Linux counterparts and applies them as one block.
"""

from typing import Annotated

import typer

from lindy.cli.commands.apply import handle_apply_outcome
from lindy.cli.display import create_candidate_table, print_error_details, print_preview
from lindy.cli.types import SkipPartitionOption, UuidOption, load_controller
from lindy.protocols.automap import AutoMapFailed
from lindy.utils.formatting import console, print_info, print_success

app = typer.Typer(
    help="Find and map Windows user folders.",
    no_args_is_help=True,
)

UserOption = Annotated[
    str | None,
    typer.Option(
        "--user",
        help="Windows profile to map. Picked automatically when omitted.",
    ),
]
YesOption = Annotated[
    bool,
    typer.Option(
        "--yes",
        "-y",
        help="Apply the proposed mappings without asking.",
    ),
]
AdoptOption = Annotated[
    bool,
    typer.Option(
        "--adopt",
        help="Adopt an existing block for the same folders without asking.",
    ),
]


@app.command()
def auto(
    user: UserOption = None,
    yes: YesOption = False,
    adopt: AdoptOption = False,
) -> None:
    """Locate Windows, mount it if needed and propose folder mappings.

    Mounting the partition needs administrator rights. The proposed
    mappings are shown for review before anything is written.

    Examples:
        lindy automap auto
        lindy automap auto --user bob --yes
    """
    with load_controller() as controller:
        controller.refresh_blocks()
        outcome = controller.auto_map(user)

        if isinstance(outcome, AutoMapFailed):
            print_error_details(outcome.details)
            raise typer.Exit(code=1)

        label = outcome.partition_label or outcome.partition_uuid or "Windows"
        print_success(f"Found {label} at {outcome.mount_point} (profile '{outcome.username}').")

        lines = controller.preview()
        print_preview(lines)
        if not yes and not typer.confirm("\nApply these mappings?", default=False):
            print_info("Nothing applied.")
            raise typer.Exit(code=0)

        handle_apply_outcome(controller, controller.apply(), adopt)


@app.command()
def guided(
    base: Annotated[
        str,
        typer.Option(
            "--base",
            "-b",
            help="Where the Windows partition is mounted.",
        ),
    ],
    uuid: UuidOption = None,
    user: UserOption = None,
    skip_partition: SkipPartitionOption = False,
    yes: YesOption = False,
    adopt: AdoptOption = False,
) -> None:
    """Propose folder mappings for an already mounted Windows partition.

    Examples:
        lindy automap guided --base /mnt/windows
        lindy automap guided --base /media/bob/OS --user bob --skip-partition
    """
    with load_controller() as controller:
        controller.refresh_partitions()
        controller.refresh_blocks()

        candidates = controller.suggest_folders(base, user)
        if not candidates:
            print_info(f"No matching user folders found under {base}.")
            raise typer.Exit(code=1)

        console.print(create_candidate_table(candidates))

        if uuid is None:
            mounted = next(
                (p for p in controller.partitions.partitions if p.mountpoint == base.rstrip("/")),
                None,
            )
            uuid = mounted.uuid if mounted is not None else None

        if not yes and not typer.confirm("\nApply these mappings?", default=False):
            print_info("Nothing applied.")
            raise typer.Exit(code=0)

        outcome = controller.confirm_folders(candidates, uuid, base, skip_partition)
        handle_apply_outcome(controller, outcome, adopt)
