"""Unit tests for shell execution utilities."""

import os
import stat
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from lindy.utils.shell import (
    CommandNotStartedError,
    CommandResult,
    command_exists,
    run_command,
    run_script,
    wrap_script,
)


class TestCommandResult:
    """Tests for CommandResult."""

    def test_success(self) -> None:
        """Exit code 0 means success."""
        assert CommandResult(stdout="", stderr="", returncode=0).success

    def test_failure(self) -> None:
        """Any other exit code is a failure."""
        assert not CommandResult(stdout="", stderr="oops", returncode=3).success


class TestRunCommand:
    """Tests for run_command function."""

    @patch("lindy.utils.shell.subprocess.run")
    def test_captures_output(self, mock_run: MagicMock) -> None:
        """stdout, stderr and exit code are carried over."""
        mock_run.return_value = MagicMock(stdout="out", stderr="err", returncode=2)

        result = run_command(["lsblk"])

        assert result == CommandResult(stdout="out", stderr="err", returncode=2)
        assert mock_run.call_args.kwargs["capture_output"] is True
        assert mock_run.call_args.kwargs["text"] is True

    @patch("lindy.utils.shell.subprocess.run")
    def test_passes_timeout(self, mock_run: MagicMock) -> None:
        """The timeout reaches subprocess.run."""
        mock_run.return_value = MagicMock(stdout="", stderr="", returncode=0)

        run_command(["lsblk"], timeout=5.0)

        assert mock_run.call_args.kwargs["timeout"] == 5.0

    @patch("lindy.utils.shell.subprocess.run")
    def test_timeout_propagates(self, mock_run: MagicMock) -> None:
        """Timeouts are raised to the caller."""
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="pkexec", timeout=1)

        with pytest.raises(subprocess.TimeoutExpired):
            run_command(["pkexec", "true"], timeout=1)

    @patch("lindy.utils.shell.subprocess.run")
    def test_missing_executable_propagates(self, mock_run: MagicMock) -> None:
        """A missing executable raises FileNotFoundError."""
        mock_run.side_effect = FileNotFoundError("pkexec")

        with pytest.raises(FileNotFoundError):
            run_command(["pkexec", "true"])


class TestWrapScript:
    """Tests for wrap_script function."""

    def test_body_inside_function(self) -> None:
        """The body runs as one function called at the very end."""
        script = wrap_script("echo one\necho two\n")

        assert script == "set -e\nmain() {\necho one\necho two\n}\nmain\n"

    def test_missing_newline_added(self) -> None:
        """A body without a trailing newline still closes the function cleanly."""
        assert wrap_script("true") == "set -e\nmain() {\ntrue\n}\nmain\n"


class TestRunScript:
    """Tests for run_script function."""

    def test_writes_private_file_and_removes_it(self) -> None:
        """The script file is 0700, passed to sh after the prefix, and deleted afterwards."""
        seen: dict[str, object] = {}

        def fake_run(args: list[str], *, timeout: float | None = 60.0) -> CommandResult:
            path = Path(args[-1])
            seen["args"] = args
            seen["mode"] = stat.S_IMODE(os.stat(path).st_mode)
            seen["text"] = path.read_text(encoding="utf-8")
            seen["timeout"] = timeout
            return CommandResult(stdout="done\n", stderr="", returncode=0)

        with patch("lindy.utils.shell.run_command", side_effect=fake_run):
            result = run_script(["pkexec"], "echo hi\n", timeout=30.0)

        assert result.stdout == "done\n"
        args = seen["args"]
        assert isinstance(args, list)
        assert args[:2] == ["pkexec", "sh"]
        assert seen["mode"] == 0o700
        assert seen["text"] == wrap_script("echo hi\n")
        assert seen["timeout"] == 30.0
        assert not Path(args[-1]).exists()

    def test_undecodable_bytes_written_back(self) -> None:
        """Surrogate escapes in the body become the original bytes on disk."""
        seen: dict[str, bytes] = {}

        def fake_run(args: list[str], *, timeout: float | None = 60.0) -> CommandResult:
            seen["raw"] = Path(args[-1]).read_bytes()
            return CommandResult(stdout="", stderr="", returncode=0)

        body = b"# caf\xe9\n".decode("utf-8", errors="surrogateescape")
        with patch("lindy.utils.shell.run_command", side_effect=fake_run):
            run_script(["pkexec"], body, timeout=5.0)

        assert b"# caf\xe9\n" in seen["raw"]

    def test_timeout_is_failed_result(self) -> None:
        """A timeout becomes returncode -1 with a readable message."""
        with patch(
            "lindy.utils.shell.run_command",
            side_effect=subprocess.TimeoutExpired(cmd="pkexec", timeout=2),
        ):
            result = run_script(["pkexec"], "sleep 10\n", timeout=2.0)

        assert result.returncode == -1
        assert "timed out after 2s" in result.stderr

    def test_spawn_failure_raises(self) -> None:
        """An elevation command that cannot start raises CommandNotStartedError."""
        with (
            patch("lindy.utils.shell.run_command", side_effect=FileNotFoundError("pkexec")),
            pytest.raises(CommandNotStartedError, match="failed to spawn pkexec"),
        ):
            run_script(["pkexec"], "true\n", timeout=5.0)

    def test_file_removed_after_spawn_failure(self) -> None:
        """The temporary script is deleted even when nothing ran."""
        seen: dict[str, str] = {}

        def fake_run(args: list[str], *, timeout: float | None = 60.0) -> CommandResult:
            seen["path"] = args[-1]
            raise PermissionError("denied")

        with (
            patch("lindy.utils.shell.run_command", side_effect=fake_run),
            pytest.raises(CommandNotStartedError),
        ):
            run_script(["pkexec"], "true\n", timeout=5.0)

        assert not Path(seen["path"]).exists()


class TestCommandExists:
    """Tests for command_exists function."""

    @patch("lindy.utils.shell.shutil.which", return_value="/usr/bin/lsblk")
    def test_found(self, mock_which: MagicMock) -> None:
        """Commands on PATH exist."""
        assert command_exists("lsblk")
        mock_which.assert_called_once_with("lsblk")

    @patch("lindy.utils.shell.shutil.which", return_value=None)
    def test_missing(self, mock_which: MagicMock) -> None:
        """Commands not on PATH do not exist."""
        assert not command_exists("lsblk")
