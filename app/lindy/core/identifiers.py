"""Identifier generation and validation.

Partition ids are validated against the filesystem identifier shapes seen
in practice. Block ids are short random tokens embedded in the markers.
"""

import re
import secrets
import string

from lindy.models.mapping import new_mapping_id

_PARTITION_ID_PATTERNS: tuple[re.Pattern[str], ...] = (
    # Canonical UUID (ext4, btrfs, ...): version nibble 1-5, variant nibble 8/9/a/b
    re.compile(
        r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
        re.IGNORECASE,
    ),
    # FAT/exFAT volume serial
    re.compile(r"^[0-9a-f]{4}-[0-9a-f]{4}$", re.IGNORECASE),
    # NTFS volume serial
    re.compile(r"^[0-9a-f]{16}$", re.IGNORECASE),
    # Undashed 128-bit id
    re.compile(r"^[0-9a-f]{32}$", re.IGNORECASE),
)

BLOCK_ID_ALPHABET = string.ascii_lowercase + string.digits
BLOCK_ID_LENGTH = 8


def validate_partition_id(value: str | None) -> bool:
    """Check whether a string looks like a filesystem identifier.

    Surrounding whitespace is ignored. Empty input is invalid.

    Args:
        value: Candidate identifier.

    Returns:
        True if the value matches one of the accepted shapes.
    """
    if value is None:
        return False
    candidate = value.strip()
    if not candidate:
        return False
    return any(pattern.match(candidate) for pattern in _PARTITION_ID_PATTERNS)


def generate_block_id() -> str:
    """Generate an 8-character lower-case alphanumeric block id.

    Collisions are not checked here: a colliding id would show up as an
    existing block during the marker scan.
    """
    return "".join(secrets.choice(BLOCK_ID_ALPHABET) for _ in range(BLOCK_ID_LENGTH))


__all__ = ["generate_block_id", "new_mapping_id", "validate_partition_id"]
