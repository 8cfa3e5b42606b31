"""Fan-in of independent result streams.

One pump task per source forwards into a shared bounded sink, so
the merged stream yields whichever source is ready first.
"""

import asyncio
from collections.abc import AsyncIterator, Sequence
from typing import Any

from loguru import logger

from treesum.models.results import ChecksumError, ErrorKind, Result, is_result

_END = object()


def coerce_result(label: str, element: Any) -> Result:
    """Pass a Result through, or degrade anything else to an error tied to ``label``."""
    if is_result(element):
        return element  # type: ignore[no-any-return]
    logger.error("Unrecognized element from source {}: {!r}", label, element)
    return ChecksumError(
        label,
        ErrorKind.INTERNAL_AGGREGATION_FAILURE,
        TypeError(f"Expected a checksum result, got {type(element).__name__}"),
    )


class ResultAggregator:
    """Merges N result streams into one.

    Every element of every source is delivered exactly once. There is
    no ordering across sources. The merged stream ends after all
    sources have ended.

    Attributes:
        buffer_size: Capacity of the shared sink
    """

    def __init__(self, buffer_size: int = 100) -> None:
        self.buffer_size = buffer_size

    async def merge(
        self, sources: Sequence[tuple[str, AsyncIterator[Any]]]
    ) -> AsyncIterator[Result]:
        """
        Merge labelled sources into a single stream.

        Args:
            sources: ``(label, stream)`` pairs; the label names the source
                in errors that cannot be tied to a file

        Yields:
            Results in arrival order
        """
        if not sources:
            return

        sink: asyncio.Queue[object] = asyncio.Queue(maxsize=self.buffer_size)
        pumps = [asyncio.create_task(self._pump(label, stream, sink)) for label, stream in sources]

        remaining = len(pumps)
        try:
            while remaining:
                item = await sink.get()
                if item is _END:
                    remaining -= 1
                    continue
                yield item  # type: ignore[misc]
        finally:
            for pump in pumps:
                pump.cancel()
            await asyncio.gather(*pumps, return_exceptions=True)

    async def _pump(self, label: str, stream: AsyncIterator[Any], sink: "asyncio.Queue[object]") -> None:
        try:
            async for element in stream:
                await sink.put(coerce_result(label, element))
        except Exception as e:
            logger.error("Source {} failed: {}", label, e)
            await sink.put(ChecksumError(label, ErrorKind.INTERNAL_AGGREGATION_FAILURE, e))
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()

        await sink.put(_END)
