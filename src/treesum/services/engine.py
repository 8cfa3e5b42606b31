"""Checksum engine: the public entry points.

Composes the tree walker, worker pool and result aggregator. Every
entry point returns an async stream of Results; failures are values
on that stream, never raised.
"""

import asyncio
from collections.abc import AsyncIterator, Sequence
from pathlib import Path

from loguru import logger

from treesum.config.models import EngineConfig, WalkConfig
from treesum.digest.registry import AlgorithmTable
from treesum.errors import UnsupportedAlgorithmError
from treesum.models.results import ChecksumError, ErrorKind, FileChecksum, Result
from treesum.ports.digest import DigestFactory
from treesum.services.aggregator import ResultAggregator
from treesum.services.pool import WorkerPool
from treesum.services.processor import FileProcessor
from treesum.services.walker import TreeWalker


class ChecksumEngine:
    """
    Concurrent file and directory checksums.

    The algorithm table is injected, not looked up globally, so
    callers (and tests) control exactly which digests exist.
    """

    def __init__(
        self,
        algorithms: AlgorithmTable,
        engine_config: EngineConfig | None = None,
        walk_config: WalkConfig | None = None,
    ) -> None:
        self.algorithms = algorithms
        self.config = engine_config or EngineConfig()
        self.walk_config = walk_config or WalkConfig()
        self.processor = FileProcessor(chunk_size=self.config.chunk_size)
        self.aggregator = ResultAggregator(buffer_size=self.config.result_buffer)

    def _resolve(self, path: Path, algorithm: str) -> DigestFactory | ChecksumError:
        try:
            return self.algorithms.resolve(algorithm)
        except UnsupportedAlgorithmError as e:
            logger.warning("Unsupported algorithm for {}: {}", path, e)
            return ChecksumError(str(path), ErrorKind.UNSUPPORTED_ALGORITHM, e)

    async def checksum_file(self, path: Path, algorithm: str) -> AsyncIterator[Result]:
        """
        Checksum a single file.

        Args:
            path: File to hash; a directory yields WRONG_FILE_TYPE.
            algorithm: Name in the algorithm table.

        Yields:
            Exactly one Result.
        """
        factory = self._resolve(path, algorithm)
        if isinstance(factory, ChecksumError):
            yield factory
            return

        yield await asyncio.to_thread(self.processor.process, path, factory)

    async def checksum_tree(
        self,
        root: Path,
        algorithm: str,
        cancel: asyncio.Event | None = None,
    ) -> AsyncIterator[Result]:
        """
        Checksum every file beneath ``root`` (or ``root`` itself if it is a file).

        Args:
            root: File or directory.
            algorithm: Name in the algorithm table.
            cancel: Optional event; once set, no new files are started.

        Yields:
            One Result per discovered file and per traversal failure.
        """
        factory = self._resolve(root, algorithm)
        if isinstance(factory, ChecksumError):
            yield factory
            return

        walker = TreeWalker(
            follow_symlinks=self.walk_config.follow_symlinks,
            exclude_patterns=self.walk_config.exclude_patterns,
        )
        pool = WorkerPool(
            self.processor,
            workers=self.config.workers,
            intake_size=self.config.intake_size,
            result_buffer=self.config.result_buffer,
        )

        logger.info("Checksum started: root={} algorithm={}", root, algorithm)
        hashed = failed = 0
        async for result in pool.run(walker.iter_entries(root), factory, cancel):
            if isinstance(result, FileChecksum):
                hashed += 1
                logger.debug("{}={}", result.path, result.hexdigest)
            else:
                failed += 1
                logger.warning("{}", result)
            yield result

        logger.info("Checksum complete: root={} files={} errors={}", root, hashed, failed)

    async def checksum_many(
        self,
        roots: Sequence[Path],
        algorithm: str,
        cancel: asyncio.Event | None = None,
    ) -> AsyncIterator[Result]:
        """
        Checksum several roots concurrently, merging their results.

        Each root gets its own walker and worker pool.

        Args:
            roots: Files and/or directories.
            algorithm: Name in the algorithm table.
            cancel: Optional event shared by every root.

        Yields:
            Results from all roots in arrival order.
        """
        sources = [(str(root), self.checksum_tree(root, algorithm, cancel)) for root in roots]
        async for result in self.aggregator.merge(sources):
            yield result
