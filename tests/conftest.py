"""Shared pytest fixtures for treesum tests."""

import hashlib
import io
import threading
import time
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from loguru import logger

from treesum.digest.registry import AlgorithmTable


@pytest.fixture
def algorithms() -> AlgorithmTable:
    """Algorithm table with the digests used throughout the tests."""
    return AlgorithmTable.from_hashlib(["md5", "sha1", "sha256", "sha512"])


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """Directory with five files across nested subdirectories."""
    root = tmp_path / "tree"
    (root / "docs" / "deep").mkdir(parents=True)
    (root / "src").mkdir()
    (root / "a.txt").write_text("alpha")
    (root / "b.bin").write_bytes(bytes(range(256)) * 40)
    (root / "docs" / "readme.md").write_text("# readme")
    (root / "docs" / "deep" / "empty").write_bytes(b"")
    (root / "src" / "main.py").write_text("print('hello')\n")
    return root


@pytest.fixture
def digests_of() -> Callable[[Path, str], dict[str, str]]:
    """Hash every file under a root directly with hashlib."""

    def _digests(root: Path, algorithm: str) -> dict[str, str]:
        return {
            str(path): hashlib.new(algorithm, path.read_bytes()).hexdigest()
            for path in root.rglob("*")
            if path.is_file()
        }

    return _digests


class ConcurrencyProbe:
    """Digest factory that records how many digests are live at once.

    A digest is live from creation until finalize, which falls inside
    the window the processor holds its file open.
    """

    def __init__(self, delay: float = 0.005) -> None:
        self.delay = delay
        self.active = 0
        self.peak = 0
        self.created = 0
        self._lock = threading.Lock()

    def __call__(self) -> "_ProbeDigest":
        with self._lock:
            self.active += 1
            self.created += 1
            self.peak = max(self.peak, self.active)
        return _ProbeDigest(self)

    def release(self) -> None:
        with self._lock:
            self.active -= 1


class _ProbeDigest:
    def __init__(self, probe: ConcurrencyProbe) -> None:
        self._probe = probe
        self._hash = hashlib.sha1()

    def update(self, data: bytes) -> None:
        time.sleep(self._probe.delay)
        self._hash.update(data)

    def finalize(self) -> bytes:
        self._probe.release()
        return self._hash.digest()


@pytest.fixture
def probe() -> ConcurrencyProbe:
    return ConcurrencyProbe()


@pytest.fixture
def log_capture() -> Generator[io.StringIO, None, None]:
    """Capture loguru output to a string buffer."""
    string_io = io.StringIO()
    handler_id = logger.add(string_io, format="{level} {message}", level="DEBUG")
    yield string_io
    logger.remove(handler_id)
