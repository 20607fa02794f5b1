"""History entry model for the operations log.

Every privileged operation lindy performs is recorded here so that the
user can see what was applied, adopted or removed, and when.
"""

import json
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class HistoryActionType(str, Enum):
    """Type of action recorded in history.

    Attributes:
        APPLY: A new block was appended to the mount table.
        ADOPT: An existing block was taken under management.
        REMOVE: A managed block was unmounted and removed.
        AUTOMAP: The automatic mount-and-map flow ran.
    """

    APPLY = "apply"
    ADOPT = "adopt"
    REMOVE = "remove"
    AUTOMAP = "automap"


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """Record of a single operation in history.

    Attributes:
        id: Unique identifier (12-character hex string from UUID).
        timestamp: When the action occurred (ISO 8601 format with timezone).
        action_type: Type of action.
        block_id: Block the action touched, if any.
        targets: Bind targets involved.
        success: Whether the action completed successfully.
        metadata: Additional context (code, message, force flag, ...).
    """

    id: str
    timestamp: str
    action_type: HistoryActionType
    block_id: str | None = None
    targets: tuple[str, ...] = ()
    success: bool = True
    metadata: dict[str, Any] = field(default_factory=lambda: {})

    def __post_init__(self) -> None:
        """Validate entry data after initialization."""
        if not self.id:
            msg = "History entry ID cannot be empty"
            raise ValueError(msg)
        if not self.timestamp:
            msg = "Timestamp cannot be empty"
            raise ValueError(msg)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "action_type": self.action_type.value,
            "block_id": self.block_id,
            "targets": list(self.targets),
            "success": self.success,
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HistoryEntry":
        """Deserialize from dictionary.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If action_type is invalid.
        """
        return cls(
            id=data["id"],
            timestamp=data["timestamp"],
            action_type=HistoryActionType(data["action_type"]),
            block_id=data.get("block_id"),
            targets=tuple(data.get("targets", [])),
            success=data.get("success", True),
            metadata=data.get("metadata", {}),
        )

    def to_json_line(self) -> str:
        """Serialize to JSON line for JSONL storage (no trailing newline)."""
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_json_line(cls, line: str) -> "HistoryEntry":
        """Deserialize from JSON line.

        Raises:
            json.JSONDecodeError: If line is not valid JSON.
            KeyError: If required fields are missing.
            ValueError: If data is invalid.
        """
        data = json.loads(line.strip())
        return cls.from_dict(data)


def create_history_entry(
    action_type: HistoryActionType,
    block_id: str | None = None,
    targets: list[str] | tuple[str, ...] = (),
    success: bool = True,
    metadata: dict[str, Any] | None = None,
) -> HistoryEntry:
    """Factory function to create a new HistoryEntry.

    Automatically generates a unique ID and current timestamp.

    Args:
        action_type: Type of action being recorded.
        block_id: Block the action touched.
        targets: Bind targets involved.
        success: Whether the action succeeded.
        metadata: Optional additional context.

    Returns:
        New HistoryEntry with auto-generated ID and timestamp.
    """
    return HistoryEntry(
        id=uuid.uuid4().hex[:12],
        timestamp=datetime.now(UTC).isoformat(),
        action_type=action_type,
        block_id=block_id,
        targets=tuple(targets),
        success=success,
        metadata=metadata or {},
    )
