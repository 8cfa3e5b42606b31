"""Tree walker for discovering files to checksum.

Handles file discovery beneath a root, reporting traversal
failures as results instead of aborting the walk.
"""

import os
import stat
from collections.abc import Iterable, Iterator
from pathlib import Path

from loguru import logger

from treesum.models.results import ChecksumError, ErrorKind


class TreeWalker:
    """Discovers every non-directory entry beneath a root.

    Yields discovered paths and, for entries that could not be
    statted or directories that could not be listed, a WALK_FAILURE
    ChecksumError. A failure never stops the walk of siblings.

    Attributes:
        follow_symlinks: Descend into symlinked directories
        exclude_patterns: Glob patterns of entries to skip
    """

    def __init__(
        self,
        follow_symlinks: bool = False,
        exclude_patterns: Iterable[str] = (),
    ) -> None:
        self.follow_symlinks = follow_symlinks
        self.exclude_patterns = list(exclude_patterns)

    def iter_entries(self, root: Path) -> Iterator[Path | ChecksumError]:
        """Iterate over the files beneath ``root``.

        A root that cannot be statted yields a single CANNOT_BE_READ
        error. A root that is not a directory is yielded as-is.

        Yields:
            Paths of non-directory entries, or ChecksumError values
        """
        try:
            root_info = root.stat()
        except OSError as e:
            yield ChecksumError(str(root), ErrorKind.CANNOT_BE_READ, e)
            return

        if not stat.S_ISDIR(root_info.st_mode):
            yield root
            return

        visited = {(root_info.st_dev, root_info.st_ino)}
        pending = [root]

        while pending:
            directory = pending.pop()

            try:
                with os.scandir(directory) as it:
                    entries = sorted(it, key=lambda entry: entry.name)
            except OSError as e:
                logger.warning("Cannot list directory {}: {}", directory, e)
                yield ChecksumError(str(directory), ErrorKind.WALK_FAILURE, e)
                continue

            # Push subdirectories in reverse so they are walked in name order
            subdirs: list[Path] = []
            for entry in entries:
                path = directory / entry.name

                if self._is_excluded(path):
                    continue

                try:
                    info = entry.stat(follow_symlinks=True)
                    is_link = entry.is_symlink()
                except OSError as e:
                    logger.warning("Cannot stat {}: {}", path, e)
                    yield ChecksumError(str(path), ErrorKind.WALK_FAILURE, e)
                    continue

                if not stat.S_ISDIR(info.st_mode):
                    yield path
                    continue

                if is_link and not self.follow_symlinks:
                    logger.debug("Skipping symlinked directory: {}", path)
                    continue

                key = (info.st_dev, info.st_ino)
                if key in visited:
                    logger.debug("Skipping already visited directory: {}", path)
                    continue
                visited.add(key)
                subdirs.append(path)

            pending.extend(reversed(subdirs))

    def _is_excluded(self, path: Path) -> bool:
        """Check if path matches any exclude pattern."""
        return any(path.match(pattern) for pattern in self.exclude_patterns)
