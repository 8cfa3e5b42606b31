"""Port interfaces for digest primitives and adapters."""

from collections.abc import Callable
from typing import Protocol


class HashPrimitive(Protocol):
    """Incremental hash supplied from outside treesum (e.g. a hashlib object).

    ``update`` may return the number of bytes absorbed; ``None`` means the
    whole chunk was taken, which is what hashlib objects do.
    """

    def update(self, data: bytes, /) -> int | None:
        """Absorb a chunk of input."""
        ...

    def digest(self) -> bytes:
        """Return the digest of everything absorbed so far."""
        ...


class DigestPort(Protocol):
    """Protocol for a single-use streaming digest accumulator."""

    def update(self, data: bytes) -> None:
        """Feed one chunk.

        Raises:
            HashWriteError: If the accumulator did not absorb the full chunk.
        """
        ...

    def finalize(self) -> bytes:
        """Return the final digest. May be called only once.

        Raises:
            DigestFinalizedError: On a second call.
        """
        ...


# Returns a fresh accumulator on every call.
DigestFactory = Callable[[], DigestPort]
