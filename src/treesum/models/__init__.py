"""Domain models for treesum."""

from treesum.models.results import (
    ChecksumError,
    ErrorKind,
    FileChecksum,
    Result,
    WorkItem,
    is_result,
)

__all__ = [
    "ChecksumError",
    "ErrorKind",
    "FileChecksum",
    "Result",
    "WorkItem",
    "is_result",
]
