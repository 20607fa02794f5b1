"""In-memory snapshots of partitions and mount-table blocks.

Both snapshots are replaced wholesale on refresh, never merged. A refresh
only commits if its token is still live, so a slow superseded refresh
cannot overwrite a newer one.
"""

import logging
import threading

from lindy.core.tasks import CancellationToken
from lindy.helpers.base import PrivilegedHelper
from lindy.models.block import FstabBlock
from lindy.models.partition import Partition, canonicalize_uuid

logger = logging.getLogger(__name__)


class PartitionDirectory:
    """Current list of block devices.

    Identifiers are not assumed to be unique or stable across refreshes.
    """

    def __init__(self, helper: PrivilegedHelper) -> None:
        self._helper = helper
        self._lock = threading.Lock()
        self._partitions: tuple[Partition, ...] = ()

    @property
    def partitions(self) -> tuple[Partition, ...]:
        with self._lock:
            return self._partitions

    def refresh(self, token: CancellationToken | None = None) -> bool:
        """Re-scan block devices.

        Args:
            token: Cancellation token checked before committing.

        Returns:
            True if the snapshot was replaced.
        """
        try:
            partitions = tuple(self._helper.list_partitions())
        except RuntimeError as e:
            logger.warning("Partition refresh failed: %s", e)
            return False

        if token is not None and token.cancelled:
            logger.debug("Discarding superseded partition refresh")
            return False
        with self._lock:
            self._partitions = partitions
        return True

    def find_by_uuid(self, uuid: str) -> Partition | None:
        wanted = canonicalize_uuid(uuid)
        return next((p for p in self.partitions if p.uuid == wanted), None)

    def windows_candidates(self) -> list[Partition]:
        """NTFS and exFAT partitions."""
        return [p for p in self.partitions if p.is_windows]


class BlockRegistry:
    """Current view of the marked blocks in the mount table.

    The registry is only ever updated by ``refresh``; protocols trigger a
    refresh after a terminal outcome instead of editing it.
    """

    def __init__(self, helper: PrivilegedHelper) -> None:
        self._helper = helper
        self._lock = threading.Lock()
        self._blocks: tuple[FstabBlock, ...] = ()

    @property
    def blocks(self) -> tuple[FstabBlock, ...]:
        with self._lock:
            return self._blocks

    def refresh(self, token: CancellationToken | None = None) -> bool:
        """Re-read the mount table and ownership records.

        Failures are logged and leave the previous snapshot in place.

        Args:
            token: Cancellation token checked before committing.

        Returns:
            True if the snapshot was replaced.
        """
        try:
            blocks = tuple(self._helper.list_blocks())
        except (OSError, RuntimeError, ValueError) as e:
            logger.warning("Block refresh failed: %s", e)
            return False

        if token is not None and token.cancelled:
            logger.debug("Discarding superseded block refresh")
            return False
        with self._lock:
            self._blocks = blocks
        return True

    def find_by_id(self, block_id: str) -> FstabBlock | None:
        return next((b for b in self.blocks if b.id == block_id), None)

    def find_by_target(self, target: str) -> FstabBlock | None:
        wanted = target.strip()
        return next((b for b in self.blocks if wanted in b.targets), None)

    def is_bound(self, target: str) -> bool:
        """Whether any known block binds onto ``target``."""
        return self.find_by_target(target) is not None

    def managed(self) -> list[FstabBlock]:
        return [b for b in self.blocks if b.managed]

    def foreign(self) -> list[FstabBlock]:
        return [b for b in self.blocks if not b.managed]
