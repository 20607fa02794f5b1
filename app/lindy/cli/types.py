"""Shared option types and helpers for CLI commands.

This module provides the mapping options used by preview, apply and the
auto-map commands, and builds the controller from the user config.
"""

from typing import Annotated

import typer

from lindy.core.config import ConfigError, load_config
from lindy.core.controller import MountController
from lindy.core.paths import get_config_path
from lindy.models.mapping import Mapping
from lindy.utils.formatting import print_error

MapOption = Annotated[
    list[str] | None,
    typer.Option(
        "--map",
        "-m",
        help="Folder mapping as SRC:TARGET. Repeat for several folders.",
    ),
]
UuidOption = Annotated[
    str | None,
    typer.Option(
        "--uuid",
        "-u",
        help="Partition UUID for the device line.",
    ),
]
BaseOption = Annotated[
    str | None,
    typer.Option(
        "--base",
        "-b",
        help="Where the partition is mounted. Defaults to the configured base mount.",
    ),
]
SkipPartitionOption = Annotated[
    bool,
    typer.Option(
        "--skip-partition",
        help="Do not add a device line; the partition is mounted elsewhere.",
    ),
]


def load_controller() -> MountController:
    """Build a controller from the user configuration.

    Raises:
        typer.Exit: If the configuration file is invalid.
    """
    try:
        config = load_config()
    except ConfigError as e:
        print_error(f"Invalid configuration in {get_config_path()}: {e}")
        raise typer.Exit(code=1) from e
    return MountController(config)


def parse_mappings(specs: list[str] | None) -> list[Mapping]:
    """Parse ``--map`` arguments.

    Raises:
        typer.BadParameter: If an argument is not SRC:TARGET.
    """
    mappings: list[Mapping] = []
    for spec in specs or []:
        try:
            mappings.append(Mapping.parse(spec))
        except ValueError as e:
            raise typer.BadParameter(str(e), param_hint="--map") from e
    return mappings


def configure_session(
    controller: MountController,
    maps: list[str] | None,
    uuid: str | None,
    base: str | None,
    skip_partition: bool,
) -> None:
    """Load the command-line mapping options into the controller session."""
    session = controller.session
    session.extend(parse_mappings(maps))
    if uuid:
        session.set_partition_uuid(uuid)
        partition = controller.partitions.find_by_uuid(uuid)
        if partition is not None and base is None:
            session.select_partition(partition)
    if base is not None:
        session.set_base_mount(base)
    session.skip_partition_mount = skip_partition
