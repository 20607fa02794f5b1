"""Mount-table block data models.

A block is the region between a BEGIN and an END marker in the mount
table. Blocks are observed from the table, never edited in place.
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class FstabBind:
    """One bind line inside a block.

    Attributes:
        src: Source directory.
        target: Mount point the source is bound to.
    """

    src: str
    target: str

    def to_dict(self) -> dict[str, str]:
        return {"src": self.src, "target": self.target}


@dataclass(frozen=True, slots=True)
class FstabBlock:
    """A marked region of the mount table.

    Attributes:
        id: Block identifier taken from the markers.
        text: Full block text including both markers.
        targets: Targets of every bind line, in file order.
        binds: Parsed bind lines, in file order.
        managed: True when lindy holds an ownership record for the block.
    """

    id: str
    text: str
    targets: tuple[str, ...] = ()
    binds: tuple[FstabBind, ...] = ()
    managed: bool = False

    def __post_init__(self) -> None:
        """Validate block data after initialization."""
        if not self.id:
            msg = "Block ID cannot be empty"
            raise ValueError(msg)

    def has_target(self, target: str) -> bool:
        return target in self.targets

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON output."""
        return {
            "id": self.id,
            "text": self.text,
            "targets": list(self.targets),
            "binds": [b.to_dict() for b in self.binds],
            "managed": self.managed,
        }


@dataclass(frozen=True, slots=True)
class BlockMetadata:
    """Ownership record stored as <metadata_dir>/<id>.json.

    Its existence is what makes a block managed.

    Attributes:
        id: Block identifier.
        block: Block text at install or adoption time.
        targets: Bind targets at install or adoption time.
        installed_at: Unix timestamp of installation or adoption.
    """

    id: str
    block: str
    targets: tuple[str, ...] = ()
    installed_at: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BlockMetadata":
        """Deserialize from a metadata JSON object.

        Raises:
            KeyError: If the id is missing.
            ValueError: If the id is empty.
        """
        block_id = str(data["id"]).strip()
        if not block_id:
            msg = "Metadata record has an empty id"
            raise ValueError(msg)
        targets = data.get("targets") or []
        return cls(
            id=block_id,
            block=str(data.get("block") or ""),
            targets=tuple(str(t) for t in targets),
            installed_at=int(data.get("installed_at") or 0),
        )
