"""Privileged helper backed by pkexec.

Each state-changing operation is rendered as one POSIX shell script and
executed as ``pkexec sh <script>``. One call means one polkit prompt. A
script that gets to its end prints its result as one JSON line on
stdout, which is read back as the OperationResult.

Exit codes of the scripts:
    0: success
    2: an unmount failed (non-force removal)
    3: ``mount -a`` failed after the table was changed
    anything else: a command inside the script failed (``set -e``)
"""

import json
import logging
import shlex
import time
from dataclasses import replace
from pathlib import Path

from lindy.core.config import LindyConfig
from lindy.core.fstab import (
    device_mountpoint,
    find_block_for_target,
    find_unmarked_entry,
    scan_blocks,
    strip_block,
)
from lindy.core.paths import APP_NAME
from lindy.helpers.base import ElevationUnavailableError, PrivilegedHelper
from lindy.models.automap import (
    AutoMapError,
    AutoMapSuccess,
    CandidateModel,
    WindowsPartitionRef,
)
from lindy.models.block import FstabBlock
from lindy.models.folder import FolderCandidate, UserFolder
from lindy.models.partition import Partition
from lindy.models.request import ApplyRequest, RemoveRequest
from lindy.models.result import ErrorCode, OperationResult, OperationStatus
from lindy.scanners.folders import (
    UserFolderScanner,
    detect_windows_users,
    local_username,
    pick_windows_user,
    suggest_folder_mappings,
)
from lindy.scanners.fstab import FstabScanner
from lindy.scanners.partitions import PartitionScanner
from lindy.utils.shell import CommandNotStartedError, CommandResult, run_script

logger = logging.getLogger(__name__)

EXIT_UMOUNT_FAILED = 2
EXIT_MOUNT_FAILED = 3

_HEREDOC_TAG = "LINDY_EOF"


def _q(value: str | Path) -> str:
    return shlex.quote(str(value))


def _heredoc(command: str, content: str) -> str:
    """``command <<'TAG'`` with content passed through unexpanded."""
    body = content if content.endswith("\n") else content + "\n"
    return f"{command} <<'{_HEREDOC_TAG}'\n{body}{_HEREDOC_TAG}\n"


class PkexecHelper(PrivilegedHelper):
    """Privileged helper running shell scripts through an elevation command.

    Args:
        config: Paths and elevation settings.
        partition_scanner: Override for tests.
        home: Linux home directory for folder matching.
    """

    def __init__(
        self,
        config: LindyConfig | None = None,
        partition_scanner: PartitionScanner | None = None,
        home: Path | None = None,
    ) -> None:
        self._config = config or LindyConfig()
        self._partitions = partition_scanner or PartitionScanner()
        self._blocks = FstabScanner(self._config.fstab_path, self._config.metadata_dir)
        self._home = home

    @property
    def fstab_path(self) -> Path:
        return self._config.fstab_path

    @property
    def metadata_dir(self) -> Path:
        return self._config.metadata_dir

    # ------------------------------------------------------------------
    # Read-only queries
    # ------------------------------------------------------------------

    def list_partitions(self) -> list[Partition]:
        return self._partitions.collect()

    def list_blocks(self) -> list[FstabBlock]:
        return self._blocks.collect()

    def detect_user_folders(self, windows_profile: Path | None = None) -> list[UserFolder]:
        return UserFolderScanner(home=self._home, windows_profile=windows_profile).collect()

    def suggest_folder_mappings(
        self, windows_base: Path, username: str | None = None
    ) -> list[FolderCandidate]:
        return suggest_folder_mappings(windows_base, username=username, home=self._home)

    # ------------------------------------------------------------------
    # Apply
    # ------------------------------------------------------------------

    def apply_block(self, request: ApplyRequest) -> OperationResult:
        """Append a block, write its ownership record and run ``mount -a``.

        Targets already bound inside any marked block make the call resolve
        as adoptable for that block; targets used by an unmarked line are a
        conflict. Nothing is written in either case.

        Args:
            request: The block to append.

        Returns:
            OperationResult with status ok, adoptable or error.
        """
        if not request.block.strip() or not request.id.strip():
            return _error(ErrorCode.INVALID_REQUEST, "Empty block or missing block id")

        fstab_text = self._blocks.read_text()
        if fstab_text is not None:
            conflict = self._check_conflicts(fstab_text, request.targets)
        else:
            conflict = self._check_records(request.targets)
        if conflict is not None:
            return conflict

        now = int(time.time())
        metadata = {
            "id": request.id,
            "block": request.block,
            "targets": list(request.targets),
            "installed_at": now,
        }
        fstab = _q(self.fstab_path)
        script = [f"cp {fstab} {_q(self._backup_path(now))}"]
        script.append(_heredoc(f"cat >> {fstab}", request.block).rstrip("\n"))
        script.extend(self._write_metadata_lines(request.id, metadata))
        script.append("if ! mount -a; then")
        for target in request.targets:
            script.append(f"  printf 'fuser %s:\\n' {_q(target)} >&2")
            script.append(f"  fuser -mv {_q(target)} >&2 || true")
        script.append(f"  exit {EXIT_MOUNT_FAILED}")
        script.append("fi")

        return self._execute(
            "\n".join(script) + "\n",
            ok_code="applied",
            ok_message="fstab block appended and mount -a executed",
            block_id=request.id,
            targets=request.targets,
        )

    def _check_conflicts(self, fstab_text: str, targets: tuple[str, ...]) -> OperationResult | None:
        blocks = scan_blocks(fstab_text)
        for target in targets:
            block = find_block_for_target(blocks, target)
            if block is not None:
                logger.info("Target %s already bound by block %s", target, block.id)
                return OperationResult(
                    status=OperationStatus.ADOPTABLE,
                    code=ErrorCode.ADOPTABLE_EXISTING_BLOCK.value,
                    message=(
                        f"target {target} already present in {self.fstab_path} inside "
                        f"block {block.id}; adopt to let {APP_NAME} manage it."
                    ),
                    block_id=block.id,
                    block=block.text,
                    targets=block.targets,
                )
            line = find_unmarked_entry(fstab_text, target)
            if line is not None:
                return _error(
                    ErrorCode.TARGET_CONFLICT,
                    f"target {target} already present in {self.fstab_path} (line: {line.strip()})",
                )
        return None

    def _check_records(self, targets: tuple[str, ...]) -> OperationResult | None:
        """Conflict check against ownership records when the table is unreadable."""
        record = self._blocks.find_record_for_targets(targets)
        if record is None:
            return None
        taken = ", ".join(t for t in targets if t in record.targets)
        logger.info("Target %s already recorded for block %s", taken, record.id)
        return _error(
            ErrorCode.TARGET_CONFLICT,
            f"target {taken} already managed by {APP_NAME} "
            f"(record {self._metadata_path(record.id)}); {self.fstab_path} could not be read",
        )

    # ------------------------------------------------------------------
    # Adopt
    # ------------------------------------------------------------------

    def adopt_block(self, block_id: str) -> OperationResult:
        """Write the ownership record for an existing block.

        Mount state is left alone.
        """
        fstab_text = self._blocks.read_text()
        if fstab_text is None:
            return _error(ErrorCode.NOT_FOUND, f"cannot read {self.fstab_path}")

        block = next((b for b in scan_blocks(fstab_text) if b.id == block_id), None)
        if block is None:
            return _error(ErrorCode.NOT_FOUND, f"block id {block_id} not found in {self.fstab_path}")

        metadata = {
            "id": block.id,
            "block": block.text,
            "targets": list(block.targets),
            "installed_at": int(time.time()),
        }
        script = self._write_metadata_lines(block.id, metadata)
        return self._execute(
            "\n".join(script) + "\n",
            ok_code="adopted",
            ok_message=f"adopted block {block.id}",
        )

    # ------------------------------------------------------------------
    # Remove
    # ------------------------------------------------------------------

    def remove(self, request: RemoveRequest) -> OperationResult:
        """Unmount a block's targets and drop it from the table.

        Bind targets are unmounted in reverse order, then the block's own
        device mount point. Without force the first failing unmount aborts
        the script before the table is touched.
        """
        fstab_text = self._blocks.read_text()
        blocks = scan_blocks(fstab_text) if fstab_text is not None else []

        if request.target:
            block = find_block_for_target(blocks, request.target)
        else:
            block = next((b for b in blocks if b.id == request.block_id), None)

        if block is None:
            if request.block_id and self._metadata_path(request.block_id).exists():
                # Record without a block: only the record is left to clean up
                script = f"rm -f {_q(self._metadata_path(request.block_id))}\n"
                return self._execute(script, ok_code="removed", ok_message="stale record removed")
            return _error(ErrorCode.NOT_FOUND, f"no {APP_NAME} block for {request.subject}")

        return self._remove_block(block, fstab_text or "", request.force)

    def _remove_block(self, block: FstabBlock, fstab_text: str, force: bool) -> OperationResult:
        now = int(time.time())
        fstab = _q(self.fstab_path)
        new_path = _q(f"{self.fstab_path}.{APP_NAME}.new")

        mountpoints = list(reversed(block.targets))
        device = device_mountpoint(block.text)
        if device is not None and device not in mountpoints:
            mountpoints.append(device)

        script: list[str] = []
        for mountpoint in mountpoints:
            script.extend(_umount_lines(mountpoint, force))
        script.append(_heredoc(f"cat > {new_path}", strip_block(fstab_text, block.id)).rstrip("\n"))
        script.append(f"cp {fstab} {_q(self._backup_path(now))}")
        script.append(f"mv {new_path} {fstab}")
        script.append("sync")
        script.append(f"rm -f {_q(self._metadata_path(block.id))}")
        script.append(f"mount -a || exit {EXIT_MOUNT_FAILED}")

        return self._execute(
            "\n".join(script) + "\n",
            ok_code="removed",
            ok_message="fstab block removed and mount -a executed",
            block_id=block.id,
            targets=block.targets,
        )

    # ------------------------------------------------------------------
    # Automatic mount-and-map
    # ------------------------------------------------------------------

    def auto_mount_and_map(
        self,
        preferred_mount_base: str | None = None,
        username: str | None = None,
    ) -> AutoMapSuccess | AutoMapError:
        """Locate the Windows partition, mount it if needed, match folders.

        Args:
            preferred_mount_base: Where to mount an unmounted partition.
            username: Windows profile to use. Detected when omitted.

        Returns:
            Success with candidate mappings, or an error with a fixed code.
        """
        try:
            partitions = self.list_partitions()
        except RuntimeError as e:
            logger.warning("Partition scan failed: %s", e)
            partitions = []

        windows = [p for p in partitions if p.is_windows]
        if not windows:
            return AutoMapError(
                status="error",
                code=ErrorCode.NO_WINDOWS_PARTITIONS.value,
                message="no NTFS or exFAT partitions found",
            )

        partition = self._pick_windows_partition(windows)
        mount_point = partition.mountpoint
        if not mount_point:
            mount_point = preferred_mount_base or self._config.auto_mount_base
            failure = self._mount_partition(partition, mount_point)
            if failure is not None:
                return failure

        base = Path(mount_point)
        if username is None:
            username = pick_windows_user(detect_windows_users(base), local_username())
        if username is None:
            return AutoMapError(
                status="error",
                code=ErrorCode.NO_USERS_DETECTED.value,
                message=f"no Windows user profiles under {base / 'Users'}",
                mount_point=mount_point,
            )

        candidates = self.suggest_folder_mappings(base, username)
        if not candidates:
            return AutoMapError(
                status="error",
                code=ErrorCode.NO_MAPPINGS_FOUND.value,
                message=f"no standard folders to map for {username}",
                username=username,
                mount_point=mount_point,
            )

        return AutoMapSuccess(
            status="ok",
            mount_point=mount_point,
            windows_partition=WindowsPartitionRef(uuid=partition.uuid, label=partition.label),
            username=username,
            mappings=[
                CandidateModel(
                    folder_type=c.folder_type,
                    linux_path=c.linux_path,
                    windows_path=c.windows_path,
                )
                for c in candidates
            ],
        )

    def _pick_windows_partition(self, windows: list[Partition]) -> Partition:
        """Mounted partitions with a Users folder first, then any mounted one."""
        for partition in windows:
            if partition.mountpoint and (Path(partition.mountpoint) / "Users").is_dir():
                return partition
        for partition in windows:
            if partition.mountpoint:
                return partition
        return windows[0]

    def _mount_partition(self, partition: Partition, mount_point: str) -> AutoMapError | None:
        source = f"UUID={partition.uuid}" if partition.uuid else f"/dev/{partition.name}"
        script = f"mkdir -p {_q(mount_point)}\nmount {_q(source)} {_q(mount_point)}\n"
        try:
            result = self._run_script(script)
        except ElevationUnavailableError as e:
            return AutoMapError(
                status="error",
                code=ErrorCode.SPAWN_PKEXEC_FAILED.value,
                message=str(e),
            )
        if result.success:
            logger.info("Mounted %s at %s", source, mount_point)
            return None
        return AutoMapError(
            status="error",
            code=ErrorCode.MOUNT_FAILED.value,
            message=f"mounting {source} at {mount_point} failed",
            stderr=result.stderr,
            stdout=result.stdout,
            mount_point=mount_point,
        )

    # ------------------------------------------------------------------
    # Script plumbing
    # ------------------------------------------------------------------

    def _backup_path(self, now: int) -> str:
        return f"{self.fstab_path}.{APP_NAME}.bak.{now}"

    def _metadata_path(self, block_id: str) -> Path:
        return self.metadata_dir / f"{block_id}.json"

    def _write_metadata_lines(self, block_id: str, metadata: dict[str, object]) -> list[str]:
        content = json.dumps(metadata, indent=2)
        return [
            f"mkdir -p {_q(self.metadata_dir)}",
            _heredoc(f"cat > {_q(self._metadata_path(block_id))}", content).rstrip("\n"),
        ]

    def _execute(
        self,
        script: str,
        *,
        ok_code: str,
        ok_message: str,
        block_id: str | None = None,
        targets: tuple[str, ...] = (),
    ) -> OperationResult:
        """Run a script and read its result.

        The script ends by printing the success payload. Exit code 0
        without a readable payload becomes unrecognized_response with the
        output kept verbatim.
        """
        report = OperationResult(
            status=OperationStatus.OK,
            code=ok_code,
            message=ok_message,
            block_id=block_id,
            targets=targets,
        )
        script += f"printf '%s\\n' {_q(json.dumps(report.to_dict()))}\n"
        try:
            result = self._run_script(script)
        except ElevationUnavailableError as e:
            return _error(ErrorCode.SPAWN_PKEXEC_FAILED, str(e))

        if result.success:
            parsed = OperationResult.from_payload(_last_line(result.stdout))
            if parsed.error_code is ErrorCode.UNRECOGNIZED_RESPONSE:
                logger.warning("Privileged script exited 0 without a result line")
            return replace(parsed, stdout=result.stdout, stderr=result.stderr)
        return OperationResult(
            status=OperationStatus.ERROR,
            code=ErrorCode.PKEXEC_FAILED.value,
            message=f"{self._config.elevation_command[0]} exited with code {result.returncode}",
            block_id=block_id,
            targets=targets,
            stdout=result.stdout,
            stderr=result.stderr,
        )

    def _run_script(self, script: str) -> CommandResult:
        """Execute a script with elevation.

        Raises:
            ElevationUnavailableError: If the elevation command can't start.
        """
        try:
            return run_script(
                self._config.elevation_command,
                script,
                timeout=float(self._config.helper_timeout_seconds),
            )
        except CommandNotStartedError as e:
            raise ElevationUnavailableError(str(e)) from e


def _last_line(stdout: str) -> str:
    """Last non-empty output line, or all of the output if there is none."""
    lines = [line for line in stdout.splitlines() if line.strip()]
    return lines[-1] if lines else stdout


def _umount_lines(mountpoint: str, force: bool) -> list[str]:
    target = _q(mountpoint)
    if force:
        action = (
            f"umount {target} || umount -l {target} || "
            f"printf 'lazy unmount of %s failed\\n' {target} >&2"
        )
    else:
        action = (
            f"umount {target} || {{ printf 'umount %s failed\\n' {target} >&2; "
            f"exit {EXIT_UMOUNT_FAILED}; }}"
        )
    return [f"if mountpoint -q {target}; then", f"  {action}", "fi"]


def _error(code: ErrorCode, message: str) -> OperationResult:
    return OperationResult(status=OperationStatus.ERROR, code=code.value, message=message)
