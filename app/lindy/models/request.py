"""Requests sent to the privileged helper."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class ApplyRequest:
    """Append one new block to the mount table.

    Attributes:
        block: Full block text including markers.
        id: Block identifier used in the markers.
        targets: Bind targets inside the block.
        partition_uuid: Partition id of the device line, if any.
        base_mount: Mount point of the device line, if any.
        add_partition_line: Whether the block carries a device line.
    """

    block: str
    id: str
    targets: tuple[str, ...]
    partition_uuid: str | None = None
    base_mount: str | None = None
    add_partition_line: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "block": self.block,
            "id": self.id,
            "targets": list(self.targets),
            "partition_uuid": self.partition_uuid,
            "base_mount": self.base_mount,
            "add_partition_line": self.add_partition_line,
        }


@dataclass(frozen=True, slots=True)
class RemoveRequest:
    """Unmount and remove one block, addressed by target or by id.

    Attributes:
        target: Any bind target of the block.
        block_id: Block identifier, used when no target is known.
        force: Fall back to lazy unmount for busy mounts.
    """

    target: str | None = None
    block_id: str | None = None
    force: bool = False

    def __post_init__(self) -> None:
        """Validate that the block is addressed somehow."""
        if not self.target and not self.block_id:
            msg = "RemoveRequest needs a target or a block id"
            raise ValueError(msg)

    @property
    def subject(self) -> str:
        """What the request is about, for messages."""
        return self.target or self.block_id or ""

    def with_force(self) -> "RemoveRequest":
        return RemoveRequest(target=self.target, block_id=self.block_id, force=True)
