"""Unit tests for the error classifier and manual remediation commands."""

import pytest
from lindy.core.classifier import classify, describe_automap_error, describe_result
from lindy.core.fstab import render_block
from lindy.core.remediation import busy_hint, manual_apply_command, manual_remove_command
from lindy.models.automap import AutoMapError
from lindy.models.error import ErrorCategory
from lindy.models.result import OperationResult, OperationStatus


class TestClassify:
    """Tests for classify."""

    @pytest.mark.parametrize(
        ("stderr", "category"),
        [
            ("$MFTMirr does not match $MFT (record 3)", ErrorCategory.IMPROPER_SHUTDOWN),
            ("Volume is inconsistent", ErrorCategory.IMPROPER_SHUTDOWN),
            ("mount: Input/output error", ErrorCategory.IMPROPER_SHUTDOWN),
            ("mount: permission denied", ErrorCategory.PERMISSION),
            ("Operation not permitted", ErrorCategory.PERMISSION),
            ("umount: /home/bob/Documents: target is busy.", ErrorCategory.BUSY),
            ("device is busy", ErrorCategory.BUSY),
            ("mount: /mnt/x: No such file or directory", ErrorCategory.NOT_FOUND),
            ("No such device", ErrorCategory.NOT_FOUND),
            ("partition is part of a dmraid set", ErrorCategory.UNSUPPORTED_LAYOUT),
            ("something entirely different", ErrorCategory.GENERIC),
            ("", ErrorCategory.GENERIC),
        ],
    )
    def test_categories(self, stderr: str, category: ErrorCategory) -> None:
        """Known signatures map to their category, anything else to generic."""
        assert classify(stderr, "").category == category

    @pytest.mark.parametrize("stderr", ["", "target is busy", "weird", "$MFTMirr does not match $MFT"])
    def test_total(self, stderr: str) -> None:
        """Every input gets non-empty texts and technical equal to stderr."""
        details = classify(stderr, "")

        assert details.title
        assert details.message
        assert details.solution
        assert details.technical == stderr

    def test_none_inputs(self) -> None:
        """Missing output is treated as empty."""
        details = classify(None, None)

        assert details.category == ErrorCategory.GENERIC
        assert details.technical == ""

    def test_stdout_is_searched(self) -> None:
        """Signatures in stdout count too."""
        assert classify("", "Device is BUSY").category == ErrorCategory.BUSY

    def test_first_rule_wins(self) -> None:
        """Earlier rules take precedence when several match."""
        details = classify("input/output error, permission denied", "")

        assert details.category == ErrorCategory.IMPROPER_SHUTDOWN

    def test_improper_shutdown_scenario(self) -> None:
        """A mount_failed payload with the MFT mismatch is an improper shutdown."""
        result = OperationResult.from_payload(
            {"status": "error", "code": "mount_failed", "stderr": "$MFTMirr does not match $MFT"}
        )

        details = describe_result(result)

        assert details.category == ErrorCategory.IMPROPER_SHUTDOWN
        assert details.title == "Windows Wasn't Shut Down Properly"


class TestDescribeResult:
    """Tests for describe_result."""

    def test_spawn_failure(self) -> None:
        """A helper that cannot start is reported as unavailable."""
        result = OperationResult(
            status=OperationStatus.ERROR,
            code="spawn_pkexec_failed",
            message="pkexec: not found",
        )

        details = describe_result(result)

        assert details.category == ErrorCategory.ELEVATION_UNAVAILABLE
        assert details.technical == "pkexec: not found"

    def test_pkexec_failure_classified(self) -> None:
        """pkexec failures go through the signature table."""
        result = OperationResult(
            status=OperationStatus.ERROR,
            code="pkexec_failed",
            stderr="umount: target is busy",
        )

        assert describe_result(result).category == ErrorCategory.BUSY

    def test_generic_pkexec_failure_uses_message(self) -> None:
        """Without stderr the helper message becomes the technical detail."""
        result = OperationResult(
            status=OperationStatus.ERROR,
            code="pkexec_failed",
            message="Request dismissed",
        )

        assert describe_result(result).technical == "Request dismissed"

    @pytest.mark.parametrize("code", ["target_conflict", "not_found", "invalid_request"])
    def test_fixed_texts(self, code: str) -> None:
        """Codes with fixed texts keep the message as technical detail."""
        result = OperationResult(status=OperationStatus.ERROR, code=code, message="detail")

        details = describe_result(result)

        assert details.title
        assert details.technical == "detail"

    def test_unknown_code_keeps_raw(self) -> None:
        """Unknown codes surface the raw payload verbatim."""
        result = OperationResult.from_payload('{"status": "error", "code": "disk_on_fire"}')

        details = describe_result(result)

        assert details.title == "Something Went Wrong"
        assert details.technical == '{"status": "error", "code": "disk_on_fire"}'


class TestDescribeAutoMapError:
    """Tests for describe_automap_error."""

    @pytest.mark.parametrize(
        ("code", "category"),
        [
            ("spawn_pkexec_failed", ErrorCategory.ELEVATION_UNAVAILABLE),
            ("no_windows_partitions", ErrorCategory.NO_PARTITIONS),
            ("no_users_detected", ErrorCategory.NO_USERS),
            ("no_mappings_found", ErrorCategory.NO_MAPPINGS),
            ("unrecognized_response", ErrorCategory.GENERIC),
        ],
    )
    def test_fixed_messages(self, code: str, category: ErrorCategory) -> None:
        """Each flow failure gets its own explanation."""
        error = AutoMapError(status="error", code=code, username="bob", mount_point="/mnt/w")

        assert describe_automap_error(error).category == category

    def test_mount_failed_classified(self) -> None:
        """Mount failures are classified from their output."""
        error = AutoMapError(
            status="error",
            code="mount_failed",
            stderr="$MFTMirr does not match $MFT",
        )

        assert describe_automap_error(error).category == ErrorCategory.IMPROPER_SHUTDOWN

    def test_no_mappings_names_user(self) -> None:
        """The message names the Windows user."""
        error = AutoMapError(status="error", code="no_mappings_found", username="bob")

        assert "bob" in describe_automap_error(error).message


class TestRemediation:
    """Tests for manual commands."""

    def test_manual_apply_contains_block(self) -> None:
        """The block lines and mount -a appear in the command."""
        block = render_block("k3x9q2ab", ["/a /b none bind 0 0"])

        command = manual_apply_command(block, "/etc/fstab")

        assert command.startswith("sudo sh -c")
        assert "# lindy BEGIN: k3x9q2ab" in command
        assert "/a /b none bind 0 0" in command
        assert "t=\\$(mktemp)" in command
        assert ">> /etc/fstab; rm -f" in command
        assert command.endswith('mount -a"')
        assert "/tmp/" not in command

    def test_manual_apply_escapes(self) -> None:
        """Dollar signs and quotes are escaped for the outer quotes."""
        command = manual_apply_command('/mnt/$x "y" /t none bind 0 0\n')

        assert "\\$x" in command
        assert '\\"y\\"' in command

    def test_manual_apply_escapes_backticks(self) -> None:
        """Backticks in a path are not run as command substitution."""
        command = manual_apply_command("/mnt/`id` /t none bind 0 0\n")

        assert "/mnt/\\`id\\` /t" in command
        assert "/mnt/`id`" not in command

    def test_manual_remove_uses_private_temp_file(self) -> None:
        """The stripped table goes through mktemp, not a fixed path."""
        command = manual_remove_command("k3x9q2ab", "/etc/fstab")

        assert "t=\\$(mktemp)" in command
        assert "/tmp/" not in command

    def test_manual_remove(self) -> None:
        """The removal command backs up and deletes the marker range."""
        command = manual_remove_command("k3x9q2ab", "/etc/fstab")

        assert "cp /etc/fstab /etc/fstab.lindy.manual.bak." in command
        assert "/^# lindy BEGIN: k3x9q2ab/,/^# lindy END: k3x9q2ab/d" in command
        assert command.endswith('mount -a"')

    def test_busy_hint(self) -> None:
        """The hint names fuser and the target."""
        assert "fuser -mv /home/bob/Documents" in busy_hint("/home/bob/Documents")
