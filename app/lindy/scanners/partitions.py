"""Block device scanner implementation.

Lists partitions with lsblk's JSON output and flattens the device tree.
"""

import json
import logging
from collections.abc import Iterator
from typing import Any

from lindy.core.identifiers import validate_partition_id
from lindy.models.partition import Partition, canonicalize_uuid
from lindy.scanners.base import Scanner
from lindy.utils.shell import command_exists, run_command

logger = logging.getLogger(__name__)


class PartitionScanner(Scanner[Partition]):
    """Scanner for block devices via lsblk."""

    _LSBLK_COLUMNS = "NAME,FSTYPE,UUID,LABEL,MOUNTPOINT,SIZE"

    @property
    def name(self) -> str:
        return "lsblk"

    def is_available(self) -> bool:
        """Check if lsblk is available."""
        return command_exists("lsblk")

    def scan(self) -> Iterator[Partition]:
        """Scan all block devices, parents before their children.

        Yields:
            Partition for each device node.

        Raises:
            RuntimeError: If lsblk is missing, fails, or prints invalid JSON.
        """
        if not self.is_available():
            msg = "lsblk is not available on this system"
            raise RuntimeError(msg)

        result = run_command(["lsblk", "-J", "-o", self._LSBLK_COLUMNS])
        if not result.success:
            msg = f"lsblk failed: {result.stderr.strip() or 'unknown error'}"
            raise RuntimeError(msg)

        try:
            data = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            msg = f"lsblk returned invalid JSON: {e}"
            raise RuntimeError(msg) from e

        devices = data.get("blockdevices") if isinstance(data, dict) else None
        for device in devices or []:
            yield from self._flatten(device)

    def _flatten(self, node: Any) -> Iterator[Partition]:
        """Depth-first walk over one lsblk node."""
        if not isinstance(node, dict):
            return

        partition = self._parse_node(node)
        if partition is not None:
            yield partition

        for child in node.get("children") or []:
            yield from self._flatten(child)

    def _parse_node(self, node: dict[str, Any]) -> Partition | None:
        name = _str_or_none(node.get("name"))
        if name is None:
            logger.debug("Skipping lsblk node without name: %r", node)
            return None

        uuid = canonicalize_uuid(_str_or_none(node.get("uuid")))
        if uuid is not None and not validate_partition_id(uuid):
            # Advisory only, the partition is kept
            logger.warning("Partition %s has a non-standard identifier: %s", name, uuid)

        return Partition(
            name=name,
            fstype=_str_or_none(node.get("fstype")),
            label=_str_or_none(node.get("label")),
            uuid=uuid,
            mountpoint=_str_or_none(node.get("mountpoint")),
            size=_str_or_none(node.get("size")),
        )


def _str_or_none(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
