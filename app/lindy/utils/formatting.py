"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

from lindy.core.theme import get_theme

if TYPE_CHECKING:
    from lindy.models.block import FstabBlock
    from lindy.models.partition import Partition


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances (theme loaded once at import)
console = Console(theme=get_theme(), color_system=_detect_color_system())
err_console = Console(theme=get_theme(), stderr=True, color_system=_detect_color_system())


def create_partition_table(title: str = "Partitions") -> Table:
    """Create a pre-configured table for displaying block devices.

    Args:
        title: Table title.

    Returns:
        Rich Table configured for partition display.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Name", no_wrap=True)
    table.add_column("FS", style="info")
    table.add_column("Label", style="text")
    table.add_column("UUID", style="muted", no_wrap=True)
    table.add_column("Mounted at", style="text")
    table.add_column("Size", style="info", justify="right")
    return table


def format_partition_row(partition: Partition) -> tuple[str, str, str, str, str, str]:
    """Format a partition as a table row.

    Args:
        partition: Partition to format.

    Returns:
        Tuple of (name, fstype, label, uuid, mountpoint, size).
    """
    return (
        f"[text]{partition.name}[/]",
        partition.fstype or "-",
        partition.label or "-",
        partition.uuid or "-",
        partition.mountpoint or "-",
        partition.size or "-",
    )


def create_block_table(title: str = "Mount-table blocks") -> Table:
    """Create a pre-configured table for displaying marked fstab blocks.

    Args:
        title: Table title.

    Returns:
        Rich Table configured for block display.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("", width=2, justify="center")
    table.add_column("ID", no_wrap=True)
    table.add_column("Owner")
    table.add_column("Bind mounts", style="text")
    return table


def format_block_row(block: FstabBlock) -> tuple[str, str, str, str]:
    """Format a block as a table row.

    Managed blocks get a filled circle, foreign ones an empty circle.

    Args:
        block: The block to format.

    Returns:
        Tuple of (icon, id, owner, binds) with Rich markup.
    """
    if block.managed:
        icon = "[block.managed]●[/]"
        owner = "[block.managed]managed[/]"
    else:
        icon = "[block.foreign]○[/]"
        owner = "[block.foreign]foreign[/]"

    binds = "\n".join(f"{b.src} → {b.target}" for b in block.binds) or "[muted]-[/]"
    return (icon, block.id, owner, binds)


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
