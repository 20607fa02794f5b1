"""XDG-compliant path management for lindy.

This module provides standardized paths following the XDG Base Directory
Specification for configuration, state, and cache storage, plus the
system-wide locations lindy touches through the privileged helper.

XDG defaults:
- Config: ~/.config/lindy/
- State: ~/.local/state/lindy/
- Cache: ~/.cache/lindy/
"""

import os
from pathlib import Path

# Application identifier for directory naming and fstab markers
APP_NAME = "lindy"

# System locations (overridable through LindyConfig)
DEFAULT_FSTAB_PATH = Path("/etc/fstab")
DEFAULT_METADATA_DIR = Path("/var/lib") / APP_NAME


def _get_xdg_dir(env_var: str, default_subdir: str) -> Path:
    """Get XDG directory respecting environment variable override.

    Args:
        env_var: XDG environment variable name (e.g., "XDG_CONFIG_HOME").
        default_subdir: Default subdirectory under home (e.g., ".config").

    Returns:
        Path to the application-specific directory.
    """
    base = os.environ.get(env_var)
    if base:
        return Path(base) / APP_NAME
    return Path.home() / default_subdir / APP_NAME


def get_config_dir() -> Path:
    """Get the configuration directory path.

    Returns:
        Path to ~/.config/lindy/ (or XDG_CONFIG_HOME/lindy/).
    """
    return _get_xdg_dir("XDG_CONFIG_HOME", ".config")


def get_state_dir() -> Path:
    """Get the state directory path.

    State data includes the operations history that should persist
    between runs but is not configuration.

    Returns:
        Path to ~/.local/state/lindy/ (or XDG_STATE_HOME/lindy/).
    """
    return _get_xdg_dir("XDG_STATE_HOME", ".local/state")


def get_cache_dir() -> Path:
    """Get the cache directory path.

    Returns:
        Path to ~/.cache/lindy/ (or XDG_CACHE_HOME/lindy/).
    """
    return _get_xdg_dir("XDG_CACHE_HOME", ".cache")


def get_config_path() -> Path:
    """Get the main configuration file path.

    Returns:
        Path to ~/.config/lindy/config.toml.
    """
    return get_config_dir() / "config.toml"


def get_theme_path() -> Path:
    """Get the theme preferences file path.

    Returns:
        Path to ~/.config/lindy/theme.toml.
    """
    return get_config_dir() / "theme.toml"


def get_history_path() -> Path:
    """Get the history file path.

    Returns:
        Path to ~/.local/state/lindy/history.jsonl.
    """
    return get_state_dir() / "history.jsonl"


def _ensure_dir(path: Path, name: str) -> Path:
    """Create directory if it doesn't exist.

    Args:
        path: Directory path to create.
        name: Human-readable name for error messages.

    Returns:
        The created/existing directory path.

    Raises:
        RuntimeError: If directory cannot be created.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        msg = f"Cannot create {name} directory {path}: Permission denied"
        raise RuntimeError(msg) from e
    except OSError as e:
        msg = f"Cannot create {name} directory {path}: {e}"
        raise RuntimeError(msg) from e
    return path


def ensure_config_dir() -> Path:
    """Create the configuration directory if it doesn't exist.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(get_config_dir(), "config")


def ensure_state_dir() -> Path:
    """Create the state directory if it doesn't exist.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(get_state_dir(), "state")


def ensure_cache_dir() -> Path:
    """Create the cache directory if it doesn't exist.

    Raises:
        RuntimeError: If the directory cannot be created.
    """
    return _ensure_dir(get_cache_dir(), "cache")


def ensure_dirs() -> None:
    """Create all per-user application directories."""
    ensure_config_dir()
    ensure_state_dir()
    ensure_cache_dir()
