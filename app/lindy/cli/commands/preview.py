"""Preview command implementation.

Shows the mount-table lines that 'lindy apply' would write, without
touching anything.
"""

import typer

from lindy.cli.display import print_preview
from lindy.cli.types import (
    BaseOption,
    MapOption,
    SkipPartitionOption,
    UuidOption,
    configure_session,
    load_controller,
)
from lindy.utils.formatting import print_info, print_warning

app = typer.Typer(
    help="Preview the block apply would write.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def preview(
    ctx: typer.Context,
    maps: MapOption = None,
    uuid: UuidOption = None,
    base: BaseOption = None,
    skip_partition: SkipPartitionOption = False,
) -> None:
    """Preview the mount-table lines for a set of folder mappings.

    Without --map the bind mounts already installed are previewed.

    Examples:
        lindy preview -m /mnt/windows/Users/bob/Documents:/home/bob/Documents -u <UUID>
        lindy preview --skip-partition -m /mnt/data/Music:/home/bob/Music
    """
    if ctx.invoked_subcommand is not None:
        return

    with load_controller() as controller:
        controller.refresh_partitions()
        configure_session(controller, maps, uuid, base, skip_partition)
        if not maps:
            controller.refresh_blocks()
            controller.session.restore_from_blocks(controller.blocks)

        lines = controller.preview()

    if not lines:
        if not controller.session.complete_mappings():
            print_info("Nothing to preview. Add a mapping with --map SRC:TARGET.")
        elif not (controller.session.base_mount or "").strip():
            print_warning("The base mount is empty. Pass --base.")
        else:
            print_warning(f"'{controller.session.partition_uuid}' is not a valid partition UUID.")
        return

    print_preview(lines)
