"""User folder scanner implementation.

Pairs the standard Windows profile folders (Desktop, Documents, ...) with
the matching Linux directories. Linux locations honour the XDG user dirs
file so localized folder names are found.
"""

import getpass
import logging
import re
from collections.abc import Iterator
from pathlib import Path

from lindy.models.folder import STANDARD_FOLDERS, FolderCandidate, UserFolder
from lindy.scanners.base import Scanner

logger = logging.getLogger(__name__)

# Profiles under <windows>/Users that never belong to a person
SYSTEM_PROFILES = frozenset({"public", "default", "default user", "all users", "defaultuser0"})

# Standard folder name -> key in ~/.config/user-dirs.dirs
_XDG_KEYS: dict[str, str] = {
    "Desktop": "XDG_DESKTOP_DIR",
    "Documents": "XDG_DOCUMENTS_DIR",
    "Downloads": "XDG_DOWNLOAD_DIR",
    "Pictures": "XDG_PICTURES_DIR",
    "Music": "XDG_MUSIC_DIR",
    "Videos": "XDG_VIDEOS_DIR",
}

_XDG_LINE = re.compile(r'^\s*(XDG_[A-Z]+_DIR)\s*=\s*"(.*)"\s*$')


def read_xdg_user_dirs(home: Path) -> dict[str, Path]:
    """Parse ~/.config/user-dirs.dirs.

    Args:
        home: Home directory used for ``$HOME`` expansion.

    Returns:
        Mapping of XDG key to absolute path; empty if the file is missing.
    """
    path = home / ".config" / "user-dirs.dirs"
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError as e:
        logger.warning("Failed to read %s: %s", path, e)
        return {}

    result: dict[str, Path] = {}
    for line in content.splitlines():
        match = _XDG_LINE.match(line)
        if match is None:
            continue
        key, value = match.groups()
        value = value.replace("${HOME}", str(home)).replace("$HOME", str(home))
        if value.startswith("/"):
            result[key] = Path(value)
    return result


def linux_folder(name: str, home: Path, xdg_dirs: dict[str, Path]) -> Path:
    """Linux directory for a standard folder, XDG first, ~/<Name> second."""
    key = _XDG_KEYS.get(name)
    if key is not None and key in xdg_dirs:
        return xdg_dirs[key]
    return home / name


def detect_windows_users(windows_base: Path) -> list[str]:
    """Real user profiles on a mounted Windows partition.

    Args:
        windows_base: Mount point of the Windows partition.

    Returns:
        Profile names sorted case-insensitively; empty if Users is missing.
    """
    users_dir = windows_base / "Users"
    try:
        entries = list(users_dir.iterdir())
    except OSError as e:
        logger.debug("No readable Users directory at %s: %s", users_dir, e)
        return []

    users = [
        entry.name
        for entry in entries
        if entry.is_dir() and entry.name.lower() not in SYSTEM_PROFILES
    ]
    return sorted(users, key=str.lower)


def pick_windows_user(users: list[str], local_user: str | None = None) -> str | None:
    """Prefer the profile named like the local login, else the first one."""
    if not users:
        return None
    if local_user:
        for user in users:
            if user.lower() == local_user.lower():
                return user
    return users[0]


class UserFolderScanner(Scanner[UserFolder]):
    """Scanner for the standard folders on both sides.

    Args:
        home: Linux home directory. Defaults to the current user's home.
        windows_profile: Windows profile directory
            (``<base>/Users/<name>``), if one is known.
    """

    def __init__(self, home: Path | None = None, windows_profile: Path | None = None) -> None:
        self._home = home if home is not None else Path.home()
        self._windows_profile = windows_profile

    @property
    def name(self) -> str:
        return "user-folders"

    def is_available(self) -> bool:
        return self._home.is_dir()

    def scan(self) -> Iterator[UserFolder]:
        """Yield one entry per standard folder, in the standard order."""
        xdg_dirs = read_xdg_user_dirs(self._home)
        for folder in STANDARD_FOLDERS:
            linux_path = linux_folder(folder, self._home, xdg_dirs)
            windows_path = self._windows_profile / folder if self._windows_profile else None
            yield UserFolder(
                name=folder,
                linux_path=str(linux_path),
                windows_path=str(windows_path) if windows_path else None,
                exists_linux=linux_path.is_dir(),
                exists_windows=windows_path.is_dir() if windows_path else False,
            )


def suggest_folder_mappings(
    windows_base: Path,
    username: str | None = None,
    home: Path | None = None,
) -> list[FolderCandidate]:
    """Folder pairs that exist on both sides.

    Args:
        windows_base: Mount point of the Windows partition.
        username: Windows profile to use. Detected when omitted.
        home: Linux home directory.

    Returns:
        Candidates in standard folder order; empty if no profile is found.
    """
    if username is None:
        username = pick_windows_user(detect_windows_users(windows_base), local_username())
    if username is None:
        return []

    scanner = UserFolderScanner(home=home, windows_profile=windows_base / "Users" / username)
    return [
        FolderCandidate(
            folder_type=folder.name,
            linux_path=folder.linux_path,
            windows_path=folder.windows_path,
        )
        for folder in scanner.scan()
        if folder.exists_linux and folder.exists_windows and folder.windows_path
    ]


def local_username() -> str | None:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return None
