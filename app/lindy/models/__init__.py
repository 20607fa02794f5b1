"""Data models for lindy.

This module exports the core data structures used throughout the application.
"""

from lindy.models.block import BlockMetadata, FstabBind, FstabBlock
from lindy.models.error import ErrorCategory, ErrorDetails
from lindy.models.folder import STANDARD_FOLDERS, FolderCandidate, UserFolder
from lindy.models.history import HistoryActionType, HistoryEntry, create_history_entry
from lindy.models.mapping import Mapping, new_mapping_id
from lindy.models.partition import Partition, canonicalize_uuid
from lindy.models.result import (
    AdoptionCandidate,
    ErrorCode,
    OperationResult,
    OperationStatus,
)

__all__ = [
    "STANDARD_FOLDERS",
    "AdoptionCandidate",
    "BlockMetadata",
    "ErrorCategory",
    "ErrorCode",
    "ErrorDetails",
    "FolderCandidate",
    "FstabBind",
    "FstabBlock",
    "HistoryActionType",
    "HistoryEntry",
    "Mapping",
    "OperationResult",
    "OperationStatus",
    "Partition",
    "UserFolder",
    "canonicalize_uuid",
    "create_history_entry",
    "new_mapping_id",
]
