"""Standard user folder models.

Used by the auto-map flows to pair Windows profile folders with their
Linux counterparts.
"""

from dataclasses import dataclass
from typing import Any

STANDARD_FOLDERS: tuple[str, ...] = (
    "Desktop",
    "Documents",
    "Downloads",
    "Pictures",
    "Music",
    "Videos",
)


@dataclass(frozen=True, slots=True)
class UserFolder:
    """A standard folder as seen from both operating systems.

    Attributes:
        name: Folder type (e.g., 'Documents').
        linux_path: Resolved Linux directory.
        windows_path: Windows profile directory, if a profile was given.
        exists_linux: Whether the Linux directory exists.
        exists_windows: Whether the Windows directory exists.
    """

    name: str
    linux_path: str
    windows_path: str | None = None
    exists_linux: bool = False
    exists_windows: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "linux_path": self.linux_path,
            "windows_path": self.windows_path,
            "exists_linux": self.exists_linux,
            "exists_windows": self.exists_windows,
        }


@dataclass(frozen=True, slots=True)
class FolderCandidate:
    """A proposed mapping from a Windows folder onto a Linux folder.

    Attributes:
        folder_type: Folder type (e.g., 'Pictures').
        linux_path: Bind target.
        windows_path: Bind source.
    """

    folder_type: str
    linux_path: str
    windows_path: str

    def to_dict(self) -> dict[str, str]:
        return {
            "folder_type": self.folder_type,
            "linux_path": self.linux_path,
            "windows_path": self.windows_path,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FolderCandidate":
        """Deserialize from a helper payload entry.

        Raises:
            KeyError: If a path is missing.
        """
        return cls(
            folder_type=str(data.get("folder_type") or ""),
            linux_path=str(data["linux_path"]),
            windows_path=str(data["windows_path"]),
        )
