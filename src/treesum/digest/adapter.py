"""Adapter turning an incremental hash primitive into a DigestPort."""

from treesum.errors import DigestFinalizedError, HashWriteError
from treesum.ports.digest import HashPrimitive


class DigestAdapter:
    """Single-use accumulator over a hash primitive.

    A chunk is either absorbed completely or the update fails; a short
    write is reported as an error rather than as partial progress.
    """

    def __init__(self, primitive: HashPrimitive) -> None:
        self._primitive = primitive
        self._finalized = False

    def update(self, data: bytes) -> None:
        if self._finalized:
            raise DigestFinalizedError("Cannot update a finalized digest")

        try:
            written = self._primitive.update(data)
        except Exception as e:
            raise HashWriteError(f"Digest rejected chunk: {e}") from e

        if written is not None and written != len(data):
            raise HashWriteError(
                f"Did not write expected number of bytes to the digest: "
                f"expected={len(data)} written={written}",
                expected=len(data),
                written=written,
            )

    def finalize(self) -> bytes:
        if self._finalized:
            raise DigestFinalizedError("Digest already finalized")
        self._finalized = True

        try:
            return bytes(self._primitive.digest())
        except Exception as e:
            raise HashWriteError(f"Digest could not be finalized: {e}") from e
