"""Pending mapping session.

Holds what the user is composing before it becomes a block: the folder
mappings, the chosen partition and the base mount.
"""

import logging
import re
import threading
from collections.abc import Iterable

from lindy.core.config import DEFAULT_BASE_MOUNT
from lindy.models.block import FstabBlock
from lindy.models.mapping import Mapping
from lindy.models.partition import Partition, canonicalize_uuid

logger = logging.getLogger(__name__)

_UNSAFE_PATH_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def suggest_base_mount(partition: Partition) -> str:
    """Mount point proposed for a partition: ``/mnt/<label>`` or ``/mnt/<uuid[:8]>``."""
    if partition.label:
        name = _UNSAFE_PATH_CHARS.sub("_", partition.label).strip("_")
        if name:
            return f"/mnt/{name}"
    if partition.uuid:
        return f"/mnt/{partition.uuid[:8]}"
    return f"/mnt/{partition.name}"


class MappingSession:
    """Mutable state of the mapping being composed.

    Args:
        default_base_mount: Base mount pre-filled for new sessions.
    """

    def __init__(self, default_base_mount: str = DEFAULT_BASE_MOUNT) -> None:
        self._lock = threading.RLock()
        self._default_base_mount = default_base_mount
        self._mappings: list[Mapping] = []
        self.partition_uuid: str | None = None
        self.skip_partition_mount = False
        self.base_mount = default_base_mount

    @property
    def mappings(self) -> list[Mapping]:
        """Copy of the current mappings, in insertion order."""
        with self._lock:
            return list(self._mappings)

    def complete_mappings(self) -> list[Mapping]:
        with self._lock:
            return [m for m in self._mappings if m.is_complete]

    def add_mapping(self, src: str | None = None, target: str | None = None) -> Mapping:
        mapping = Mapping(src=src, target=target)
        with self._lock:
            self._mappings.append(mapping)
        return mapping

    def extend(self, mappings: Iterable[Mapping]) -> None:
        with self._lock:
            self._mappings.extend(mappings)

    def update_mapping(
        self,
        mapping_id: str,
        *,
        src: str | None = None,
        target: str | None = None,
    ) -> Mapping:
        """Set one or both sides of a mapping.

        Raises:
            KeyError: If no mapping has this id.
        """
        with self._lock:
            mapping = self._get(mapping_id)
            if src is not None:
                mapping.src = src
            if target is not None:
                mapping.target = target
            return mapping

    def remove_mapping(self, mapping_id: str) -> None:
        """Drop a mapping.

        Raises:
            KeyError: If no mapping has this id.
        """
        with self._lock:
            self._mappings.remove(self._get(mapping_id))

    def clear(self) -> None:
        with self._lock:
            self._mappings.clear()

    def _get(self, mapping_id: str) -> Mapping:
        for mapping in self._mappings:
            if mapping.id == mapping_id:
                return mapping
        raise KeyError(mapping_id)

    def set_partition_uuid(self, uuid: str | None) -> None:
        with self._lock:
            self.partition_uuid = canonicalize_uuid(uuid)

    def set_base_mount(self, base_mount: str) -> None:
        with self._lock:
            self.base_mount = base_mount

    def select_partition(self, partition: Partition) -> None:
        """Use a partition as the source device.

        The base mount is replaced with a suggestion only while it is still
        the default or blank, so a path the user typed is kept.
        """
        with self._lock:
            self.partition_uuid = partition.uuid
            current = (self.base_mount or "").strip()
            if not current or current == self._default_base_mount:
                self.base_mount = suggest_base_mount(partition)
                logger.debug("Suggested base mount %s for %s", self.base_mount, partition.name)

    def restore_from_blocks(self, blocks: Iterable[FstabBlock]) -> int:
        """Seed mappings from installed bind lines.

        Only runs while the session has no complete mapping, so it never
        overwrites work in progress.

        Returns:
            Number of mappings added.
        """
        with self._lock:
            if any(m.is_complete for m in self._mappings):
                return 0
            restored = [
                Mapping(src=bind.src, target=bind.target)
                for block in blocks
                for bind in block.binds
            ]
            if restored:
                self._mappings = restored
            return len(restored)
