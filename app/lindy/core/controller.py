"""Mount controller: one object wiring the whole lifecycle together.

The CLI and any other front end talk to this façade rather than to the
protocols directly. Every operation exists in two shapes: a blocking call
returning the outcome, and a ``submit_*`` variant returning a Future that
resolves to the same outcome.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable, Sequence
from concurrent.futures import Future
from typing import TYPE_CHECKING, TypeVar

from lindy.core.config import LindyConfig
from lindy.core.executor import get_helper, record_operation_to_history
from lindy.core.preview import PreviewWorker, compute_preview
from lindy.core.registry import BlockRegistry, PartitionDirectory
from lindy.core.session import MappingSession
from lindy.core.tasks import LatestOnly, SubmissionGuard, TaskRunner
from lindy.models.block import FstabBlock
from lindy.models.folder import FolderCandidate
from lindy.models.partition import Partition
from lindy.models.result import AdoptionCandidate
from lindy.protocols.adopt import AdoptionProtocol, AdoptOutcome
from lindy.protocols.apply import ApplyOutcome, ApplyProtocol
from lindy.protocols.automap import AutoMapOrchestrator, AutoMapOutcome
from lindy.protocols.remove import RemovalBusyRetryOffered, RemovalOutcome, RemovalProtocol

if TYPE_CHECKING:
    from lindy.helpers.base import PrivilegedHelper

logger = logging.getLogger(__name__)

OPERATIONS_LOG_SIZE = 50

O = TypeVar("O")


class MountController:
    """Façade over session, registries, protocols and background work.

    Args:
        config: Loaded configuration. Defaults are used when None.
        helper: Privileged helper. Built from the config when None.
        runner: Task runner for the ``submit_*`` variants.
        record_history: Write terminal outcomes to the history file.
        on_preview: Called with fresh preview lines from ``refresh_preview``.
    """

    def __init__(
        self,
        config: LindyConfig | None = None,
        helper: PrivilegedHelper | None = None,
        runner: TaskRunner | None = None,
        record_history: bool = True,
        on_preview: Callable[[list[str]], None] | None = None,
    ) -> None:
        self.config = config or LindyConfig()
        self.helper = helper or get_helper(self.config)
        self.runner = runner or TaskRunner()
        self._record_history = record_history
        self._on_preview = on_preview

        fstab_path = str(self.config.fstab_path)
        guard = SubmissionGuard()

        self.session = MappingSession(self.config.default_base_mount)
        self.partitions = PartitionDirectory(self.helper)
        self.registry = BlockRegistry(self.helper)
        self.apply_protocol = ApplyProtocol(self.helper, self.registry, guard, fstab_path)
        self.adoption_protocol = AdoptionProtocol(self.helper, self.registry)
        self.removal_protocol = RemovalProtocol(self.helper, self.registry, guard, fstab_path)
        self.automap = AutoMapOrchestrator(self.helper, self.session, self.apply_protocol)
        self.preview_worker = PreviewWorker(self.runner, self._deliver_preview)

        self._partition_refreshes = LatestOnly()
        self._block_refreshes = LatestOnly()
        self._operations: deque[object] = deque(maxlen=OPERATIONS_LOG_SIZE)
        self.preview_lines: list[str] = []

    # Refresh

    def refresh_partitions(self) -> bool:
        return self.partitions.refresh(self._partition_refreshes.begin())

    def refresh_blocks(self) -> bool:
        return self.registry.refresh(self._block_refreshes.begin())

    def initial_refresh(self) -> int:
        """Load partitions and blocks, then seed the session from installed binds.

        Returns:
            Number of mappings restored into the session.
        """
        self.refresh_partitions()
        self.refresh_blocks()
        restored = self.session.restore_from_blocks(self.registry.blocks)
        if restored:
            logger.info("Restored %d mappings from installed blocks", restored)
        return restored

    def submit_refresh(self) -> Future[int]:
        return self.runner.submit(self.initial_refresh)

    @property
    def blocks(self) -> tuple[FstabBlock, ...]:
        return self.registry.blocks

    # Session and preview

    def select_partition(self, partition: Partition) -> None:
        self.session.select_partition(partition)

    def preview(self) -> list[str]:
        """Preview lines for the current session, computed in place."""
        return compute_preview(
            self.session.mappings,
            self.session.partition_uuid,
            self.session.base_mount,
            self.session.skip_partition_mount,
        )

    def refresh_preview(self) -> Future[bool]:
        """Recompute the preview in the background, superseding older runs."""
        return self.preview_worker.update(
            self.session.mappings,
            self.session.partition_uuid,
            self.session.base_mount,
            self.session.skip_partition_mount,
        )

    def _deliver_preview(self, lines: list[str]) -> None:
        self.preview_lines = lines
        if self._on_preview is not None:
            self._on_preview(lines)

    # Operations

    def apply(self) -> ApplyOutcome:
        """Apply the session's complete mappings as one block."""
        outcome = self.apply_protocol.apply(
            self.session.mappings,
            self.session.partition_uuid,
            self.session.base_mount,
            self.session.skip_partition_mount,
        )
        return self._finish(outcome, "apply")

    def submit_apply(self) -> Future[ApplyOutcome]:
        return self.runner.submit(self.apply)

    def adopt(self, candidate: AdoptionCandidate | str) -> AdoptOutcome:
        return self._finish(self.adoption_protocol.adopt(candidate), "adopt")

    def submit_adopt(self, candidate: AdoptionCandidate | str) -> Future[AdoptOutcome]:
        return self.runner.submit(self.adopt, candidate)

    def remove(
        self,
        target: str | None = None,
        block_id: str | None = None,
        force: bool = False,
    ) -> RemovalOutcome:
        """Remove the block owning ``target`` or ``block_id``.

        Raises:
            ValueError: If neither target nor block id is given.
        """
        return self._finish(self.removal_protocol.remove(target, block_id, force), "remove")

    def submit_remove(
        self,
        target: str | None = None,
        block_id: str | None = None,
        force: bool = False,
    ) -> Future[RemovalOutcome]:
        return self.runner.submit(self.remove, target, block_id, force)

    def retry_with_force(self, offer: RemovalBusyRetryOffered) -> RemovalOutcome:
        return self._finish(self.removal_protocol.retry_with_force(offer), "remove --force")

    def suggest_folders(self, base_mount: str, username: str | None = None) -> list[FolderCandidate]:
        return self.automap.suggest(base_mount, username)

    def confirm_folders(
        self,
        candidates: Sequence[FolderCandidate],
        partition_uuid: str | None,
        base_mount: str,
        skip_partition_mount: bool = False,
    ) -> ApplyOutcome:
        outcome = self.automap.confirm(candidates, partition_uuid, base_mount, skip_partition_mount)
        return self._finish(outcome, "automap guided")

    def auto_map(self, username: str | None = None) -> AutoMapOutcome:
        """Automatic flow; on success the proposed mappings join the session."""
        outcome = self.automap.run(self.config.auto_mount_base, username)
        return self._finish(outcome, "automap auto")

    def submit_auto_map(self, username: str | None = None) -> Future[AutoMapOutcome]:
        return self.runner.submit(self.auto_map, username)

    @property
    def operations(self) -> list[object]:
        """Most recent outcomes, oldest first."""
        return list(self._operations)

    def close(self) -> None:
        self.preview_worker.cancel()
        self.runner.shutdown()

    def __enter__(self) -> MountController:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _finish(self, outcome: O, command: str) -> O:
        self._operations.append(outcome)
        if self._record_history:
            record_operation_to_history(outcome, f"lindy {command}")
        return outcome


