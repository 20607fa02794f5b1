"""Live preview of the block that apply would write.

compute_preview is a pure function of the session inputs. PreviewWorker
reruns it in the background whenever the inputs change and only keeps
the newest result.
"""

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import Future

from lindy.core.fstab import generate_fstab_line
from lindy.core.identifiers import validate_partition_id
from lindy.core.tasks import CancellationToken, LatestOnly, TaskRunner
from lindy.models.mapping import Mapping

logger = logging.getLogger(__name__)


def compute_preview(
    mappings: Sequence[Mapping],
    partition_uuid: str | None,
    base_mount: str | None,
    skip_partition_mount: bool,
) -> list[str]:
    """Mount-table lines a new block would contain.

    Returns nothing while the base mount is blank, while no mapping is
    complete, or while a non-skipped partition id fails validation.
    Otherwise the device line (if any) comes first and appears once,
    followed by one bind line per complete mapping.

    Args:
        mappings: Session mappings, complete or not.
        partition_uuid: Partition identifier, may be blank.
        base_mount: Where the partition is mounted.
        skip_partition_mount: Leave the device line out.

    Returns:
        Preview lines without markers.
    """
    base = (base_mount or "").strip()
    complete = [m for m in mappings if m.is_complete]
    if not base or not complete:
        return []

    uuid = (partition_uuid or "").strip()
    if not skip_partition_mount and uuid and not validate_partition_id(uuid):
        return []

    lines: list[str] = []
    seen: set[str] = set()
    for mapping in complete:
        generated = generate_fstab_line(
            uuid,
            base,
            (mapping.src or "").strip(),
            (mapping.target or "").strip(),
            skip_partition_mount,
        )
        for line in generated.split("\n"):
            if line in seen and not line.endswith(" none bind 0 0"):
                continue
            seen.add(line)
            lines.append(line)

    # Device line first
    lines.sort(key=lambda line: 0 if line.startswith("UUID=") else 1)
    return lines


class PreviewWorker:
    """Recomputes the preview off the caller's thread.

    Each ``update`` supersedes the previous one; a superseded run never
    reaches the callback.
    """

    def __init__(self, runner: TaskRunner, on_result: Callable[[list[str]], None]) -> None:
        self._runner = runner
        self._on_result = on_result
        self._latest = LatestOnly()

    def update(
        self,
        mappings: Sequence[Mapping],
        partition_uuid: str | None,
        base_mount: str | None,
        skip_partition_mount: bool,
    ) -> "Future[bool]":
        """Schedule a recomputation.

        The mappings are copied so later session edits don't leak into
        this run.

        Returns:
            Future resolving to True if the result was delivered.
        """
        token = self._latest.begin()
        snapshot = [Mapping(src=m.src, target=m.target, id=m.id) for m in mappings]
        return self._runner.submit(
            self._run, token, snapshot, partition_uuid, base_mount, skip_partition_mount
        )

    def cancel(self) -> None:
        self._latest.cancel()

    def _run(
        self,
        token: CancellationToken,
        mappings: list[Mapping],
        partition_uuid: str | None,
        base_mount: str | None,
        skip_partition_mount: bool,
    ) -> bool:
        lines = compute_preview(mappings, partition_uuid, base_mount, skip_partition_mount)
        if token.cancelled:
            logger.debug("Discarding superseded preview")
            return False
        self._on_result(lines)
        return True
