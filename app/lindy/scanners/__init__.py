"""System scanners for partitions, mount-table blocks and user folders.

This module exports the scanner classes used to observe system state.
"""

from lindy.scanners.base import Scanner
from lindy.scanners.folders import UserFolderScanner
from lindy.scanners.fstab import FstabScanner
from lindy.scanners.partitions import PartitionScanner

__all__ = ["FstabScanner", "PartitionScanner", "Scanner", "UserFolderScanner"]
