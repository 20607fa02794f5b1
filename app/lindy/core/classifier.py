"""Translate raw mount failures into plain-language explanations.

classify() looks for known signatures in the combined output of a failed
command. The table is ordered: the first matching rule wins, so more
specific causes must come before broader ones.
"""

import json
from dataclasses import dataclass, replace
from typing import Any

from lindy.models.automap import AutoMapError
from lindy.models.error import ErrorCategory, ErrorDetails
from lindy.models.result import ErrorCode, OperationResult


@dataclass(frozen=True, slots=True)
class _Rule:
    signatures: tuple[str, ...]
    category: ErrorCategory
    title: str
    message: str
    solution: str


_RULES: tuple[_Rule, ...] = (
    _Rule(
        signatures=("$mftmirr does not match $mft", "inconsistent", "input/output error"),
        category=ErrorCategory.IMPROPER_SHUTDOWN,
        title="Windows Wasn't Shut Down Properly",
        message=(
            "Your Windows partition has some errors because Windows wasn't "
            "shut down correctly last time."
        ),
        solution=(
            "This happens when Windows was forced off, lost power, or Fast Startup "
            "left the disk hibernated.\n\n"
            "Quick fix: boot into Windows, let it start normally, then shut down "
            "properly and try again."
        ),
    ),
    _Rule(
        signatures=("permission denied", "operation not permitted"),
        category=ErrorCategory.PERMISSION,
        title="Need Permission",
        message="Administrator access is needed to change mounts.",
        solution=(
            'Make sure to click "Allow" when the permission dialog appears.\n\n'
            "If no dialog shows up, check that a polkit agent is running."
        ),
    ),
    _Rule(
        signatures=("device is busy", "target is busy"),
        category=ErrorCategory.BUSY,
        title="Windows Partition is Busy",
        message="Something else is already using the partition or folder.",
        solution=(
            "Close file managers and terminals open inside the folder, wait a "
            "moment and try again. Use `fuser -mv <target>` to see who holds it."
        ),
    ),
    _Rule(
        signatures=("no such file or directory", "no such device"),
        category=ErrorCategory.NOT_FOUND,
        title="Can't Find Windows Partition",
        message="The partition or folder disappeared or can't be accessed right now.",
        solution=(
            "Refresh the partition list, check that the drive is connected, and "
            "make sure the source folder exists."
        ),
    ),
    _Rule(
        signatures=("softraid", "fakeraid", "dmraid"),
        category=ErrorCategory.UNSUPPORTED_LAYOUT,
        title="Special Disk Setup Detected",
        message="Windows is on a RAID disk configuration that needs manual setup.",
        solution=(
            "This layout can't be handled automatically. Mount the Windows "
            "partition yourself first, then map folders from that mount point."
        ),
    ),
)

_FALLBACK = _Rule(
    signatures=(),
    category=ErrorCategory.GENERIC,
    title="Couldn't Mount Windows",
    message="Something went wrong while trying to access the Windows partition.",
    solution=(
        "Restart your computer and try again, or check the technical details "
        "below for the exact error."
    ),
)


def classify(stderr: str | None, stdout: str | None) -> ErrorDetails:
    """Explain a failed command from its output.

    Total: always returns details, never raises, never mutates its inputs.

    Args:
        stderr: Captured standard error.
        stdout: Captured standard output.

    Returns:
        ErrorDetails whose ``technical`` is the original stderr.
    """
    haystack = f"{stderr or ''} {stdout or ''}".lower()
    rule = next(
        (r for r in _RULES if any(sig in haystack for sig in r.signatures)),
        _FALLBACK,
    )
    return ErrorDetails(
        title=rule.title,
        message=rule.message,
        solution=rule.solution,
        technical=stderr or "",
        category=rule.category,
    )


def describe_result(result: OperationResult) -> ErrorDetails:
    """Explain a failed privileged operation.

    Elevation and mount failures go through the signature table; the
    remaining codes get fixed texts. Unknown codes keep the raw payload
    as technical detail.

    Args:
        result: An error result from the helper.

    Returns:
        ErrorDetails for the user.
    """
    code = result.error_code

    if code == ErrorCode.SPAWN_PKEXEC_FAILED:
        return ErrorDetails(
            title="Permission Helper Not Available",
            message="The system permission helper could not be started.",
            solution=(
                "Install pkexec and make sure a polkit agent is running, or run the "
                "manual command shown below in a terminal."
            ),
            technical=result.message,
            category=ErrorCategory.ELEVATION_UNAVAILABLE,
        )
    if code in (ErrorCode.PKEXEC_FAILED, ErrorCode.MOUNT_FAILED):
        details = classify(result.stderr, result.stdout)
        if details.category == ErrorCategory.GENERIC and not result.stderr:
            return replace(details, technical=result.message)
        return details
    if code == ErrorCode.TARGET_CONFLICT:
        return ErrorDetails(
            title="Folder Already Mounted Elsewhere",
            message="A target folder is already used by another mount-table entry.",
            solution=(
                "Pick a different target folder, or remove the other entry from "
                "/etc/fstab yourself first."
            ),
            technical=result.message,
            category=ErrorCategory.GENERIC,
        )
    if code == ErrorCode.NOT_FOUND:
        return ErrorDetails(
            title="Mapping Not Found",
            message="No managed block matches this folder or id anymore.",
            solution="Refresh the block list; it may already have been removed.",
            technical=result.message,
            category=ErrorCategory.NOT_FOUND,
        )
    if code == ErrorCode.INVALID_REQUEST:
        return ErrorDetails(
            title="Nothing to Apply",
            message="The request was empty or incomplete, so nothing was changed.",
            solution="Add at least one complete folder mapping and try again.",
            technical=result.message,
            category=ErrorCategory.GENERIC,
        )

    return ErrorDetails(
        title="Something Went Wrong",
        message=result.message or "The helper returned an unexpected response.",
        solution="Check the technical details below. If this keeps happening, it is likely a bug.",
        technical=result.raw or json.dumps(result.to_dict(), indent=2),
        category=ErrorCategory.GENERIC,
    )


def describe_automap_error(error: AutoMapError) -> ErrorDetails:
    """Fixed explanation for each failure of the automatic flow.

    Args:
        error: Parsed error payload.

    Returns:
        ErrorDetails for the user.
    """
    code = ErrorCode.parse(error.code)

    if code == ErrorCode.SPAWN_PKEXEC_FAILED:
        return ErrorDetails(
            title="Permission Helper Not Available",
            message="The system permission helper isn't working right now.",
            solution=(
                "Check that pkexec and a polkit agent are installed and running, "
                "or use the guided flow with a partition you mounted yourself."
            ),
            technical=error.message,
            category=ErrorCategory.ELEVATION_UNAVAILABLE,
        )
    if code == ErrorCode.MOUNT_FAILED:
        return classify(error.stderr, error.stdout)
    if code == ErrorCode.NO_WINDOWS_PARTITIONS:
        return ErrorDetails(
            title="No Windows Found",
            message="Couldn't find a Windows partition on this computer.",
            solution=(
                "Windows may not be installed, may live on an unplugged drive, or "
                "may already be mounted elsewhere. Use the guided flow if you know "
                "where it is."
            ),
            technical="No NTFS or exFAT partitions detected via lsblk",
            category=ErrorCategory.NO_PARTITIONS,
        )
    if code == ErrorCode.NO_USERS_DETECTED:
        return ErrorDetails(
            title="No Windows Users Found",
            message="Found Windows, but couldn't find any user folders.",
            solution=(
                "This may not be the main Windows partition. Use the guided flow "
                "and give the Windows username explicitly."
            ),
            technical=f"Mounted at: {error.mount_point}, but no Users folder found",
            category=ErrorCategory.NO_USERS,
        )
    if code == ErrorCode.NO_MAPPINGS_FOUND:
        return ErrorDetails(
            title="No Folders to Map",
            message=f"Found Windows user '{error.username}', but no folders to map.",
            solution=(
                "The standard folders (Desktop, Documents, ...) don't exist on both "
                "sides yet. Create them and try again."
            ),
            technical=f"User: {error.username}, Mount: {error.mount_point}",
            category=ErrorCategory.NO_MAPPINGS,
        )

    payload: dict[str, Any] = error.model_dump()
    return ErrorDetails(
        title="Something Went Wrong",
        message="The automatic mapping ran into an unexpected problem.",
        solution="Try the guided flow instead. If this keeps happening, it is likely a bug.",
        technical=json.dumps(payload, indent=2),
        category=ErrorCategory.GENERIC,
    )
