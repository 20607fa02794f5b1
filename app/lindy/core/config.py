"""Application configuration and settings.

This module provides the configuration model and I/O functions for lindy:
where the mount table and ownership records live, the default mount bases
offered to the user, and how privileges are obtained for mount-table edits.

Configuration is stored in ~/.config/lindy/config.toml
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from lindy.core.paths import DEFAULT_FSTAB_PATH, DEFAULT_METADATA_DIR, get_config_path

logger = logging.getLogger(__name__)

DEFAULT_BASE_MOUNT = "/mnt/shared"
DEFAULT_AUTO_MOUNT_BASE = "/mnt/windows"


class LindyConfig(BaseModel):
    """Configuration for lindy.

    Attributes:
        fstab_path: Mount table managed by lindy.
        metadata_dir: Directory holding one ownership record per managed block.
        default_base_mount: Base mount path pre-filled for new sessions.
        auto_mount_base: Where the automatic flow mounts a Windows partition.
        elevation_command: Command prefix used to run privileged scripts.
        helper_timeout_seconds: Upper bound for one privileged call.
    """

    model_config = ConfigDict(extra="forbid")

    fstab_path: Annotated[
        Path,
        Field(description="Mount table managed by lindy"),
    ] = DEFAULT_FSTAB_PATH
    metadata_dir: Annotated[
        Path,
        Field(description="Ownership records for managed blocks"),
    ] = DEFAULT_METADATA_DIR
    default_base_mount: Annotated[
        str,
        Field(description="Default base mount for new mappings"),
    ] = DEFAULT_BASE_MOUNT
    auto_mount_base: Annotated[
        str,
        Field(description="Mount point used by the automatic flow"),
    ] = DEFAULT_AUTO_MOUNT_BASE
    elevation_command: Annotated[
        list[str],
        Field(min_length=1, description="Privilege elevation command prefix"),
    ] = ["pkexec"]
    helper_timeout_seconds: Annotated[
        int,
        Field(ge=30, le=3600, description="Timeout in seconds (30-3600)"),
    ] = 300

    @field_validator("default_base_mount", "auto_mount_base")
    @classmethod
    def validate_absolute(cls, v: str) -> str:
        """Mount bases must be absolute paths."""
        value = v.strip()
        if not value.startswith("/"):
            msg = f"mount base must be an absolute path: {v!r}"
            raise ValueError(msg)
        return value


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


class ConfigValidationError(ConfigError):
    """Raised when the config content does not match the schema."""


def load_config(path: Path | None = None) -> LindyConfig:
    """Load configuration from a TOML file.

    A missing file is not an error: lindy runs on defaults until the
    user saves a configuration.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated LindyConfig object.

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigValidationError: If the content doesn't match the schema.
        ConfigError: If the file exists but cannot be read.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        logger.debug("No config at %s, using defaults", config_path)
        return LindyConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return LindyConfig.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise ConfigValidationError(f"Invalid config content: {e}") from e


def save_config(config: LindyConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The LindyConfig object to save.
        path: Path to save the config. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump(mode="json")

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path
