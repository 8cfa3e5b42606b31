"""Tests for ResultAggregator."""

import asyncio
from collections.abc import AsyncIterator
from typing import Any

import pytest

from treesum.models.results import ChecksumError, ErrorKind, FileChecksum, Result
from treesum.services.aggregator import ResultAggregator, coerce_result


async def _source(*items: Any, delay: float = 0.0) -> AsyncIterator[Any]:
    for item in items:
        if delay:
            await asyncio.sleep(delay)
        yield item


async def _drain(stream: AsyncIterator[Result]) -> list[Result]:
    return [result async for result in stream]


def _checksums(prefix: str, count: int) -> list[FileChecksum]:
    return [FileChecksum(f"{prefix}/{i}", bytes([i])) for i in range(count)]


class TestCoerceResult:
    def test_passes_results_through(self) -> None:
        checksum = FileChecksum("a", b"\x01")
        error = ChecksumError("b", ErrorKind.CANNOT_OPEN)

        assert coerce_result("src", checksum) is checksum
        assert coerce_result("src", error) is error

    def test_degrades_unknown_element(self) -> None:
        result = coerce_result("src", {"path": "a"})

        assert isinstance(result, ChecksumError)
        assert result.kind == ErrorKind.INTERNAL_AGGREGATION_FAILURE
        assert result.path == "src"
        assert isinstance(result.cause, TypeError)


class TestResultAggregator:
    @pytest.mark.asyncio
    async def test_merges_every_element_once(self) -> None:
        a, b, c = _checksums("a", 10), _checksums("b", 3), _checksums("c", 7)
        aggregator = ResultAggregator(buffer_size=2)

        merged = await _drain(
            aggregator.merge(
                [
                    ("a", _source(*a, delay=0.001)),
                    ("b", _source(*b)),
                    ("c", _source(*c, delay=0.002)),
                ]
            )
        )

        assert sorted(r.path for r in merged) == sorted(r.path for r in a + b + c)
        assert len(merged) == 20

    @pytest.mark.asyncio
    async def test_preserves_order_within_a_source(self) -> None:
        a, b = _checksums("a", 5), _checksums("b", 5)

        merged = await _drain(
            ResultAggregator().merge([("a", _source(*a, delay=0.001)), ("b", _source(*b))])
        )

        assert [r for r in merged if r.path.startswith("a/")] == a
        assert [r for r in merged if r.path.startswith("b/")] == b

    @pytest.mark.asyncio
    async def test_no_sources(self) -> None:
        assert await _drain(ResultAggregator().merge([])) == []

    @pytest.mark.asyncio
    async def test_empty_sources_terminate(self) -> None:
        merged = await _drain(ResultAggregator().merge([("a", _source()), ("b", _source())]))

        assert merged == []

    @pytest.mark.asyncio
    async def test_ready_source_is_not_held_back_by_idle_one(self) -> None:
        gate = asyncio.Event()
        fast = FileChecksum("fast", b"\x01")
        slow = FileChecksum("slow", b"\x02")

        async def idle_source() -> AsyncIterator[Result]:
            await gate.wait()
            yield slow

        stream = ResultAggregator().merge([("slow", idle_source()), ("fast", _source(fast))])

        first = await asyncio.wait_for(stream.__anext__(), timeout=5)
        gate.set()
        rest = await asyncio.wait_for(_drain(stream), timeout=5)

        assert first == fast
        assert rest == [slow]

    @pytest.mark.asyncio
    async def test_malformed_element_becomes_error(self) -> None:
        good = FileChecksum("ok", b"\x00")

        merged = await _drain(ResultAggregator().merge([("src", _source(good, "garbage"))]))

        assert merged[0] == good
        assert isinstance(merged[1], ChecksumError)
        assert merged[1].kind == ErrorKind.INTERNAL_AGGREGATION_FAILURE
        assert merged[1].path == "src"

    @pytest.mark.asyncio
    async def test_failing_source_is_isolated(self) -> None:
        async def exploding() -> AsyncIterator[Result]:
            yield FileChecksum("before", b"\x00")
            raise OSError("stream broke")

        others = _checksums("other", 4)

        merged = await _drain(
            ResultAggregator().merge([("boom", exploding()), ("other", _source(*others))])
        )

        errors = [r for r in merged if isinstance(r, ChecksumError)]
        assert len(errors) == 1
        assert errors[0].path == "boom"
        assert errors[0].kind == ErrorKind.INTERNAL_AGGREGATION_FAILURE
        assert len(merged) == 6

    @pytest.mark.asyncio
    async def test_closing_merged_stream_closes_sources(self) -> None:
        closed: list[str] = []

        async def endless(label: str) -> AsyncIterator[Result]:
            try:
                i = 0
                while True:
                    yield FileChecksum(f"{label}/{i}", b"")
                    i += 1
                    await asyncio.sleep(0)
            finally:
                closed.append(label)

        stream = ResultAggregator(buffer_size=1).merge([("x", endless("x")), ("y", endless("y"))])
        await stream.__anext__()
        await stream.aclose()

        assert sorted(closed) == ["x", "y"]
