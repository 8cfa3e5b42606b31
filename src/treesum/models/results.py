"""Result values flowing through every stream boundary of the engine."""

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import TypeAlias

from treesum.ports.digest import DigestFactory


class ErrorKind(StrEnum):
    """Taxonomy of per-path checksum failures."""

    UNSUPPORTED_ALGORITHM = "unsupported_algorithm"
    CANNOT_BE_READ = "cannot_be_read"
    WRONG_FILE_TYPE = "wrong_file_type"
    CANNOT_OPEN = "cannot_open"
    READ_FAILURE = "read_failure"
    HASH_WRITE_FAILURE = "hash_write_failure"
    WALK_FAILURE = "walk_failure"
    INTERNAL_AGGREGATION_FAILURE = "internal_aggregation_failure"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_DESCRIPTIONS = {
    ErrorKind.UNSUPPORTED_ALGORITHM: "Digest algorithm is not available in this runtime",
    ErrorKind.CANNOT_BE_READ: "This file/folder could not be read",
    ErrorKind.WRONG_FILE_TYPE: "Not a regular file",
    ErrorKind.CANNOT_OPEN: "This file could not be opened",
    ErrorKind.READ_FAILURE: "This file had an error while reading",
    ErrorKind.HASH_WRITE_FAILURE: "Could not write bytes to the digest",
    ErrorKind.WALK_FAILURE: "There was a problem walking to this file/folder",
    ErrorKind.INTERNAL_AGGREGATION_FAILURE: "Result stream produced an unrecognized element",
}


@dataclass(frozen=True)
class FileChecksum:
    """Digest of one file's content at read time."""

    path: str
    digest: bytes

    @property
    def hexdigest(self) -> str:
        return self.digest.hex()


@dataclass(frozen=True)
class ChecksumError:
    """A failure tied to the path it happened on."""

    path: str
    kind: ErrorKind
    cause: BaseException | None = None

    def describe(self) -> str:
        """One-line description suitable for reports and logs."""
        text = self.kind.description
        if self.cause is not None:
            text += f" Inner: {self.cause}"
        return text

    def __str__(self) -> str:
        return f"{self.path}: {self.describe()}"


Result: TypeAlias = FileChecksum | ChecksumError


@dataclass(frozen=True)
class WorkItem:
    """A discovered file paired with the digest factory to hash it with."""

    path: Path
    digest_factory: DigestFactory


def is_result(value: object) -> bool:
    """Check whether a stream element is a valid Result."""
    return isinstance(value, FileChecksum | ChecksumError)
