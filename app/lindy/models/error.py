"""User-facing error description model."""

from dataclasses import dataclass
from enum import Enum


class ErrorCategory(str, Enum):
    """Broad cause of a failed mount-table operation."""

    IMPROPER_SHUTDOWN = "improper_shutdown"
    PERMISSION = "permission"
    BUSY = "busy"
    NOT_FOUND = "not_found"
    UNSUPPORTED_LAYOUT = "unsupported_layout"
    ELEVATION_UNAVAILABLE = "elevation_unavailable"
    NO_PARTITIONS = "no_partitions"
    NO_USERS = "no_users"
    NO_MAPPINGS = "no_mappings"
    GENERIC = "generic"


@dataclass(frozen=True, slots=True)
class ErrorDetails:
    """Plain-language explanation of a failure.

    Attributes:
        title: Short headline.
        message: What went wrong.
        solution: What the user can do next.
        technical: Raw diagnostic text, if any.
        category: Broad cause.
    """

    title: str
    message: str
    solution: str
    technical: str | None = None
    category: ErrorCategory = ErrorCategory.GENERIC
