"""CLI commands for lindy.

This package contains all subcommand implementations.
"""

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

__all__ = [
    "adopt",
    "apply",
    "automap",
    "blocks",
    "history",
    "partitions",
    "preview",
    "remove",
    "theme",
]
