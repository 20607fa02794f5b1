"""Utility modules for lindy."""

from lindy.utils.shell import (
    CommandNotStartedError,
    CommandResult,
    command_exists,
    run_command,
    run_script,
)

__all__ = ["CommandNotStartedError", "CommandResult", "command_exists", "run_command", "run_script"]
