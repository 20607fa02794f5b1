"""Abstract base class for system scanners.

Scanners read system state without elevation: block devices, the mount
table and user folders. They never change anything.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import Generic, TypeVar

T = TypeVar("T")


class Scanner(ABC, Generic[T]):
    """Abstract base class for all scanners.

    Example:
        >>> scanner = PartitionScanner()
        >>> if scanner.is_available():
        ...     for partition in scanner.scan():
        ...         print(partition.name, partition.uuid)
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short name used in log and error messages."""

    @abstractmethod
    def scan(self) -> Iterator[T]:
        """Scan and yield the observed items.

        Raises:
            RuntimeError: If the underlying source cannot be read.
        """

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this scanner can run on the current system."""

    def collect(self) -> list[T]:
        """Run a full scan and return the items as a list."""
        return list(self.scan())
