"""CLI package for lindy.

This package contains the Typer application and all subcommands.
"""

from lindy.cli.main import app

__all__ = ["app"]
