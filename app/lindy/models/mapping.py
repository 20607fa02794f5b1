"""Folder mapping data model.

A mapping pairs a source directory (usually on the Windows partition) with
a target directory on the Linux side. Mappings live only in memory until
they are turned into bind lines of a managed block.
"""

import secrets
import time
from dataclasses import dataclass, field


def new_mapping_id() -> str:
    """Generate a process-local mapping identifier.

    Time-based with a random tiebreak. Never persisted.
    """
    return f"{time.time_ns():x}-{secrets.token_hex(2)}"


@dataclass(slots=True)
class Mapping:
    """A source/target pair pending in the session.

    Mutable by design: the session edits fields in place. A mapping with
    either side missing is incomplete and excluded from preview and apply.

    Attributes:
        src: Source directory.
        target: Target directory.
        id: Session-local identity.
    """

    src: str | None = None
    target: str | None = None
    id: str = field(default_factory=new_mapping_id)

    @property
    def is_complete(self) -> bool:
        return bool(self.src and self.src.strip()) and bool(self.target and self.target.strip())

    @classmethod
    def parse(cls, spec: str) -> "Mapping":
        """Parse a 'SRC:TARGET' command-line argument.

        The last colon separates the two paths, so sources containing a
        colon still work.

        Args:
            spec: Mapping argument.

        Returns:
            New Mapping.

        Raises:
            ValueError: If the argument has no separator or an empty side.
        """
        src, sep, target = spec.rpartition(":")
        if not sep or not src.strip() or not target.strip():
            msg = f"Invalid mapping '{spec}', expected SRC:TARGET"
            raise ValueError(msg)
        return cls(src=src.strip(), target=target.strip())
