"""File processor: streams one file through a digest.

Blocking; the worker pool runs it on executor threads.
"""

import os
import stat
from pathlib import Path

from loguru import logger

from treesum.errors import HashWriteError, UnsupportedAlgorithmError
from treesum.models.results import ChecksumError, ErrorKind, FileChecksum, Result
from treesum.ports.digest import DigestFactory

DEFAULT_CHUNK_SIZE = 4096


class FileProcessor:
    """Computes the digest of a single regular file.

    Every outcome is returned as a Result; nothing is raised for
    per-file failures. Each call uses its own handle and digest, so
    one instance can be shared by any number of concurrent callers.

    Attributes:
        chunk_size: Bytes read and fed to the digest per step
    """

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.chunk_size = chunk_size

    def process(self, path: Path, digest_factory: DigestFactory) -> Result:
        """Hash the file at ``path``.

        Args:
            path: Path expected to refer to a regular file
            digest_factory: Returns a fresh digest accumulator

        Returns:
            FileChecksum on success, ChecksumError otherwise
        """
        label = str(path)

        try:
            info = os.stat(path)
        except OSError as e:
            return ChecksumError(label, ErrorKind.CANNOT_BE_READ, e)

        # Opening a FIFO or device could block or never end; refuse up front
        if not stat.S_ISREG(info.st_mode):
            return ChecksumError(label, ErrorKind.WRONG_FILE_TYPE)

        try:
            handle = open(path, "rb", buffering=self.chunk_size)  # noqa: SIM115
        except OSError as e:
            return ChecksumError(label, ErrorKind.CANNOT_OPEN, e)

        with handle:
            try:
                digest = digest_factory()
            except UnsupportedAlgorithmError as e:
                return ChecksumError(label, ErrorKind.UNSUPPORTED_ALGORITHM, e)

            while True:
                try:
                    chunk = handle.read(self.chunk_size)
                except OSError as e:
                    return ChecksumError(label, ErrorKind.READ_FAILURE, e)

                if not chunk:
                    break

                try:
                    digest.update(chunk)
                except HashWriteError as e:
                    logger.debug("Digest write failed for {}: {}", label, e)
                    return ChecksumError(label, ErrorKind.HASH_WRITE_FAILURE, e)

            try:
                value = digest.finalize()
            except HashWriteError as e:
                logger.debug("Digest finalize failed for {}: {}", label, e)
                return ChecksumError(label, ErrorKind.HASH_WRITE_FAILURE, e)

            return FileChecksum(label, value)
