"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from lindy import __version__
from lindy.cli.commands import (
    adopt,
    apply,
    automap,
    blocks,
    history,
    partitions,
    preview,
    remove,
    theme,
)
from lindy.utils.formatting import err_console

# Create main Typer app
app = typer.Typer(
    name="lindy",
    help="Bind Windows folders into your Linux home through managed fstab blocks.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"lindy version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool, quiet: bool) -> None:
    """Route log records to stderr through Rich.

    Args:
        verbose: Show DEBUG records, including every elevated script.
        quiet: Only show errors.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=verbose, rich_tracebacks=verbose)],
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-essential output.",
        ),
    ] = False,
) -> None:
    """lindy - Share Windows folders with Linux through bind mounts.

    Pairs folders on a Windows partition with folders in your home
    directory and keeps the matching /etc/fstab entries in marked blocks
    that can be listed, adopted and removed again.
    """
    configure_logging(verbose, quiet)

    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


# Register commands
app.add_typer(partitions.app, name="partitions")
app.add_typer(blocks.app, name="blocks")
app.add_typer(preview.app, name="preview")
app.add_typer(apply.app, name="apply")
app.command(name="adopt")(adopt.adopt)
app.add_typer(remove.app, name="remove")
app.add_typer(automap.app, name="automap")
app.add_typer(history.app, name="history")
app.add_typer(theme.app, name="theme")


if __name__ == "__main__":
    app()
