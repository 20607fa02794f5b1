"""Partition data model.

Describes one block device as reported by lsblk.
"""

from dataclasses import dataclass
from typing import Any

WINDOWS_FSTYPES = frozenset({"ntfs", "ntfs3", "ntfs-3g", "exfat"})


def canonicalize_uuid(raw: str | None) -> str | None:
    """Normalize a filesystem identifier before comparison or storage.

    Surrounding whitespace and enclosing braces or parentheses are stripped
    and the result is lower-cased.

    Args:
        raw: Identifier as reported by a tool or typed by the user.

    Returns:
        Canonical identifier, or None if nothing is left.
    """
    if raw is None:
        return None
    value = raw.strip().strip("{}()").strip().lower()
    return value or None


@dataclass(frozen=True, slots=True)
class Partition:
    """A block device visible to the partition scanner.

    Attributes:
        name: Kernel device name (e.g., 'nvme0n1p3').
        fstype: Filesystem type, if any.
        label: Filesystem label, if any.
        uuid: Canonical filesystem identifier, if any.
        mountpoint: Current mount point, if mounted.
        size: Human-readable size as reported by lsblk.
    """

    name: str
    fstype: str | None = None
    label: str | None = None
    uuid: str | None = None
    mountpoint: str | None = None
    size: str | None = None

    def __post_init__(self) -> None:
        """Validate partition data after initialization."""
        if not self.name:
            msg = "Partition name cannot be empty"
            raise ValueError(msg)

    @property
    def is_windows(self) -> bool:
        """True for NTFS and exFAT filesystems."""
        return (self.fstype or "").lower() in WINDOWS_FSTYPES

    @property
    def is_mounted(self) -> bool:
        return bool(self.mountpoint)

    @property
    def display_name(self) -> str:
        """Label if present, otherwise the device name."""
        return self.label or self.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON output."""
        return {
            "name": self.name,
            "fstype": self.fstype,
            "label": self.label,
            "uuid": self.uuid,
            "mountpoint": self.mountpoint,
            "size": self.size,
        }
