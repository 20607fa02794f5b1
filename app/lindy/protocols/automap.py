"""Auto-map orchestration.

Two flows find folder pairs between the Windows profile and the Linux
home directory:

- guided: the user points at a mounted Windows partition, reviews the
  suggested pairs and applies them as one block;
- automatic: one helper call locates and mounts Windows and proposes the
  pairs, which are queued into the session for review.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from lindy.core.classifier import describe_automap_error
from lindy.core.session import MappingSession
from lindy.helpers.base import PrivilegedHelper
from lindy.models.automap import AutoMapError, AutoMapSuccess
from lindy.models.error import ErrorDetails
from lindy.models.folder import FolderCandidate
from lindy.models.mapping import Mapping
from lindy.protocols.apply import ApplyOutcome, ApplyProtocol, ApplyRejected

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AutoMapSucceeded:
    """Windows was found and the proposed mappings were queued.

    Attributes:
        mount_point: Where the Windows partition is mounted.
        partition_uuid: Identifier of the Windows partition, if known.
        partition_label: Label of the Windows partition, if any.
        username: Windows profile the folders came from.
        mappings: Mappings added to the session.
    """

    mount_point: str
    partition_uuid: str | None
    partition_label: str | None
    username: str
    mappings: tuple[Mapping, ...]


@dataclass(frozen=True, slots=True)
class AutoMapFailed:
    """The automatic flow stopped; details carry the fixed explanation."""

    code: str
    details: ErrorDetails
    response: AutoMapError


AutoMapOutcome = AutoMapSucceeded | AutoMapFailed


def candidates_to_mappings(candidates: Sequence[FolderCandidate]) -> list[Mapping]:
    """Windows folder as source, Linux folder as target."""
    return [Mapping(src=c.windows_path, target=c.linux_path) for c in candidates]


class AutoMapOrchestrator:
    """Runs the guided and automatic folder-matching flows.

    Args:
        helper: Privileged helper.
        session: Session receiving base mount, partition and mappings.
        apply_protocol: Used by the guided flow to apply confirmed pairs.
    """

    def __init__(
        self,
        helper: PrivilegedHelper,
        session: MappingSession,
        apply_protocol: ApplyProtocol,
    ) -> None:
        self._helper = helper
        self._session = session
        self._apply = apply_protocol

    def suggest(self, base_mount: str, username: str | None = None) -> list[FolderCandidate]:
        """Guided flow, step one: list pairs under a mounted Windows partition."""
        candidates = self._helper.suggest_folder_mappings(Path(base_mount), username)
        logger.info("Found %d folder candidates under %s", len(candidates), base_mount)
        return candidates

    def confirm(
        self,
        candidates: Sequence[FolderCandidate],
        partition_uuid: str | None,
        base_mount: str,
        skip_partition_mount: bool = False,
    ) -> ApplyOutcome:
        """Guided flow, step two: apply the confirmed pairs as one block."""
        if not candidates:
            return ApplyRejected(reason="No folder pairs selected")
        return self._apply.apply(
            candidates_to_mappings(candidates),
            partition_uuid,
            base_mount,
            skip_partition_mount,
        )

    def run(
        self,
        preferred_mount_base: str | None = None,
        username: str | None = None,
    ) -> AutoMapOutcome:
        """Automatic flow.

        On success the session adopts the mount point as base mount, takes
        the partition identifier and gets the proposed mappings appended.

        Returns:
            AutoMapSucceeded or AutoMapFailed.
        """
        response = self._helper.auto_mount_and_map(preferred_mount_base, username)

        if isinstance(response, AutoMapError):
            logger.warning("Automatic mapping failed: %s %s", response.code, response.message)
            return AutoMapFailed(
                code=response.code,
                details=describe_automap_error(response),
                response=response,
            )

        return self._queue(response)

    def _queue(self, response: AutoMapSuccess) -> AutoMapSucceeded:
        mappings = candidates_to_mappings([m.to_candidate() for m in response.mappings])
        self._session.set_base_mount(response.mount_point)
        if response.windows_partition.uuid:
            self._session.set_partition_uuid(response.windows_partition.uuid)
        self._session.extend(mappings)
        logger.info(
            "Queued %d mappings for %s from %s",
            len(mappings),
            response.username,
            response.mount_point,
        )
        return AutoMapSucceeded(
            mount_point=response.mount_point,
            partition_uuid=self._session.partition_uuid,
            partition_label=response.windows_partition.label,
            username=response.username,
            mappings=tuple(mappings),
        )
