"""Shared Rich display functions for previews, errors and folder pairs.

Used by the preview, apply, remove and auto-map commands.
"""

from rich.panel import Panel
from rich.table import Table

from lindy.core.fstab import begin_marker, end_marker
from lindy.models.error import ErrorDetails
from lindy.models.folder import FolderCandidate
from lindy.utils.formatting import console, err_console


def print_preview(lines: list[str], block_id: str | None = None) -> None:
    """Print the lines a new block would contain.

    Args:
        lines: Preview lines without markers.
        block_id: When given, the lines are wrapped in the block markers.
    """
    if block_id:
        console.print(f"[muted]{begin_marker(block_id)}[/]", highlight=False)
    for line in lines:
        console.print(f"[block.line]{line}[/]", highlight=False, soft_wrap=True)
    if block_id:
        console.print(f"[muted]{end_marker(block_id)}[/]", highlight=False)


def print_error_details(details: ErrorDetails, show_technical: bool = True) -> None:
    """Print a classified failure as a panel on stderr.

    Args:
        details: Classified failure.
        show_technical: Append the raw diagnostic text, if any.
    """
    body = f"{details.message}\n\n[info]{details.solution}[/]"
    if show_technical and details.technical:
        body += f"\n\n[muted]{details.technical.strip()}[/]"
    err_console.print(Panel(body, title=f"[error]{details.title}[/]", border_style="error"))


def print_manual_command(command: str) -> None:
    """Print a command the user can run in a root shell instead."""
    err_console.print("\n[warning]You can make the change by hand from a root shell:[/]")
    err_console.print(command, highlight=False, markup=False, soft_wrap=True)


def create_candidate_table(candidates: list[FolderCandidate], title: str = "Folder Pairs") -> Table:
    """Create a Rich table listing proposed folder pairs.

    Args:
        candidates: Proposed Windows/Linux folder pairs.
        title: Table title.

    Returns:
        Rich Table with one row per pair.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("#", justify="right", style="muted")
    table.add_column("Folder", style="accent")
    table.add_column("Windows", style="text")
    table.add_column("Linux", style="text")

    for index, candidate in enumerate(candidates, start=1):
        table.add_row(str(index), candidate.folder_type, candidate.windows_path, candidate.linux_path)
    return table
