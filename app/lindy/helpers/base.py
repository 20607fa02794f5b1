"""Abstract base class for the privileged helper.

The helper is the only component that changes system state. Every
state-changing call resolves to an OperationResult; transport problems
are turned into error results here and never reach the protocols as
exceptions.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from lindy.core.fstab import generate_fstab_line
from lindy.models.automap import AutoMapError, AutoMapSuccess
from lindy.models.block import FstabBlock
from lindy.models.folder import FolderCandidate, UserFolder
from lindy.models.partition import Partition
from lindy.models.request import ApplyRequest, RemoveRequest
from lindy.models.result import OperationResult


class HelperError(Exception):
    """Base exception for privileged helper transport errors."""


class ElevationUnavailableError(HelperError):
    """Raised when the elevation command cannot be started at all."""


class PrivilegedHelper(ABC):
    """Interface to the privileged side of lindy.

    Read-only queries run without elevation. Apply, adopt and remove each
    make exactly one elevated call.

    Example:
        >>> helper = PkexecHelper(load_config())
        >>> result = helper.apply_block(request)
        >>> result.status
        <OperationStatus.OK: 'ok'>
    """

    @abstractmethod
    def list_partitions(self) -> list[Partition]:
        """Block devices, flattened.

        Raises:
            RuntimeError: If the devices cannot be listed.
        """

    @abstractmethod
    def list_blocks(self) -> list[FstabBlock]:
        """Marked blocks in the mount table plus metadata-only records."""

    def generate_preview_line(
        self,
        partition_uuid: str,
        base_mount: str,
        src: str,
        target: str,
        skip_partition_mount: bool,
    ) -> str:
        """Mount-table line(s) for a single mapping."""
        return generate_fstab_line(partition_uuid, base_mount, src, target, skip_partition_mount)

    @abstractmethod
    def apply_block(self, request: ApplyRequest) -> OperationResult:
        """Append a new block after checking its targets for conflicts."""

    @abstractmethod
    def adopt_block(self, block_id: str) -> OperationResult:
        """Record ownership of an existing block without touching mounts."""

    @abstractmethod
    def remove(self, request: RemoveRequest) -> OperationResult:
        """Unmount and remove the block addressed by the request."""

    @abstractmethod
    def detect_user_folders(self, windows_profile: Path | None = None) -> list[UserFolder]:
        """Standard folders on the Linux side (and Windows side if given)."""

    @abstractmethod
    def suggest_folder_mappings(
        self, windows_base: Path, username: str | None = None
    ) -> list[FolderCandidate]:
        """Folder pairs existing on both sides."""

    @abstractmethod
    def auto_mount_and_map(
        self,
        preferred_mount_base: str | None = None,
        username: str | None = None,
    ) -> AutoMapSuccess | AutoMapError:
        """Find Windows, mount it if needed and propose folder pairs."""
