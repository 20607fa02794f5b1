"""Subprocess helpers.

Plain commands (lsblk) go through run_command. Root shell scripts go
through run_script, which owns the private temporary file and turns
"could not start" into its own exception.
"""

import logging
import os
import shutil
import subprocess
import tempfile
from dataclasses import dataclass

logger = logging.getLogger(__name__)

SCRIPT_PREFIX = "lindy-"


class CommandNotStartedError(Exception):
    """The executable could not be started at all."""


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Exit code and captured output of one process.

    Attributes:
        stdout: Captured standard output.
        stderr: Captured standard error.
        returncode: Exit code; -1 when the process was killed on timeout.
    """

    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        return self.returncode == 0


def run_command(args: list[str], *, timeout: float | None = 60.0) -> CommandResult:
    """Run a command with captured text output.

    Args:
        args: Executable and its arguments.
        timeout: Seconds before the process is killed.

    Returns:
        CommandResult; a non-zero exit is not an exception.

    Raises:
        subprocess.TimeoutExpired: If the command outlives the timeout.
        FileNotFoundError: If the executable does not exist.
    """
    completed = subprocess.run(args, capture_output=True, text=True, timeout=timeout)
    return CommandResult(
        stdout=completed.stdout,
        stderr=completed.stderr,
        returncode=completed.returncode,
    )


def command_exists(name: str) -> bool:
    return shutil.which(name) is not None


def wrap_script(body: str) -> str:
    """Wrap a script body in a function that is called once at the end.

    sh reads the whole function definition before running it, so a
    syntax error anywhere in the body stops the script before its first
    command rather than halfway through.
    """
    if not body.endswith("\n"):
        body += "\n"
    return f"set -e\nmain() {{\n{body}}}\nmain\n"


def run_script(prefix: list[str], body: str, *, timeout: float) -> CommandResult:
    """Run a shell script as ``[*prefix, "sh", <file>]``.

    The script is written to a mode 0700 temporary file that is removed
    afterwards. Lone surrogates in ``body`` (undecodable bytes read from
    a system file) are written back as the original bytes.

    Args:
        prefix: Elevation command, e.g. ``["pkexec"]``.
        body: Script body; see wrap_script.
        timeout: Seconds before the run is abandoned.

    Returns:
        CommandResult of the shell. A timeout is a failed result with
        returncode -1 rather than an exception.

    Raises:
        CommandNotStartedError: If the first program in ``prefix`` cannot
            be started.
    """
    script = wrap_script(body)
    fd, path = tempfile.mkstemp(prefix=SCRIPT_PREFIX, suffix=".sh")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", errors="surrogateescape") as f:
            f.write(script)
        os.chmod(path, 0o700)
        logger.debug("Running script %s:\n%s", path, script)

        args = [*prefix, "sh", path]
        try:
            result = run_command(args, timeout=timeout)
        except subprocess.TimeoutExpired:
            return CommandResult(stdout="", stderr=f"command timed out after {timeout:g}s", returncode=-1)
        except OSError as e:
            msg = f"failed to spawn {args[0]}: {e}"
            raise CommandNotStartedError(msg) from e

        logger.debug(
            "Script exited with %d\nstdout:\n%s\nstderr:\n%s",
            result.returncode,
            result.stdout,
            result.stderr,
        )
        return result
    finally:
        try:
            os.unlink(path)
        except FileNotFoundError:
            pass
