"""Bounded worker pool running the file processor concurrently.

A feeder task moves walker output into a bounded intake queue; a
fixed set of worker tasks pull WorkItems and hash them on a
dedicated thread pool of the same size, so no more than ``workers``
files are ever open at once. Bounded queues on both sides provide
backpressure: the feeder blocks on a full intake, workers block on
a full result queue.
"""

import asyncio
from collections.abc import AsyncIterator, Iterator
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from loguru import logger

from treesum.models.results import ChecksumError, Result, WorkItem
from treesum.ports.digest import DigestFactory
from treesum.services.processor import FileProcessor

_DONE = object()


class InFlightCounter:
    """Counts WorkItems dispatched but not yet completed.

    Only mutated from the event loop thread.
    """

    def __init__(self) -> None:
        self._value = 0

    @property
    def value(self) -> int:
        return self._value

    @property
    def idle(self) -> bool:
        return self._value == 0

    def increment(self) -> None:
        self._value += 1

    def decrement(self) -> None:
        if self._value == 0:
            raise RuntimeError("In-flight counter would go negative")
        self._value -= 1


class WorkerPool:
    """Fixed-size pool of equivalent workers.

    Each call to ``run`` owns its queues, executor and in-flight
    counter, so one pool may serve concurrent runs.

    Attributes:
        processor: File processor shared by all workers
        workers: Number of concurrent workers (and executor threads)
        intake_size: Capacity of the WorkItem intake queue
        result_buffer: Capacity of the outgoing result queue
    """

    def __init__(
        self,
        processor: FileProcessor,
        workers: int = 100,
        intake_size: int | None = None,
        result_buffer: int = 100,
    ) -> None:
        if workers < 1:
            raise ValueError("workers must be at least 1")
        self.processor = processor
        self.workers = workers
        self.intake_size = intake_size or workers
        self.result_buffer = result_buffer

    async def run(
        self,
        entries: Iterator[Path | ChecksumError],
        digest_factory: DigestFactory,
        cancel: asyncio.Event | None = None,
    ) -> AsyncIterator[Result]:
        """Hash every path produced by ``entries``.

        Walk failures produced by ``entries`` are passed through unchanged.
        The stream ends once ``entries`` is exhausted and every dispatched
        WorkItem has completed.

        Args:
            entries: Walker output; advanced on a worker thread
            digest_factory: Creates one digest per file
            cancel: When set, stop feeding and drop queued, unstarted items

        Yields:
            One Result per path, plus passed-through errors
        """
        intake: asyncio.Queue[WorkItem | None] = asyncio.Queue(maxsize=self.intake_size)
        results: asyncio.Queue[object] = asyncio.Queue(maxsize=self.result_buffer)
        executor = ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="treesum-worker")
        in_flight = InFlightCounter()

        feeder = asyncio.create_task(
            self._feed(entries, digest_factory, intake, results, in_flight, cancel)
        )
        workers = [
            asyncio.create_task(self._work(intake, results, executor, in_flight, cancel))
            for _ in range(self.workers)
        ]
        finisher = asyncio.create_task(self._finish(feeder, workers, results, in_flight))

        try:
            while True:
                item = await results.get()
                if item is _DONE:
                    break
                yield item  # type: ignore[misc]

            # Surfaces feeder/worker bugs; per-file failures never get here
            await finisher
        finally:
            for task in (feeder, *workers, finisher):
                task.cancel()
            await asyncio.gather(feeder, *workers, finisher, return_exceptions=True)
            # Threads still hashing finish their file; nothing waits for them
            executor.shutdown(wait=False, cancel_futures=True)

    async def _feed(
        self,
        entries: Iterator[Path | ChecksumError],
        digest_factory: DigestFactory,
        intake: "asyncio.Queue[WorkItem | None]",
        results: "asyncio.Queue[object]",
        in_flight: InFlightCounter,
        cancel: asyncio.Event | None,
    ) -> None:
        """Move walker output into the intake, then stop the workers."""
        discovered = 0
        while cancel is None or not cancel.is_set():
            # Walking does blocking I/O; advance it off the event loop
            entry = await asyncio.to_thread(next, entries, None)
            if entry is None:
                break

            if isinstance(entry, ChecksumError):
                await results.put(entry)
                continue

            in_flight.increment()
            await intake.put(WorkItem(path=entry, digest_factory=digest_factory))
            discovered += 1
        else:
            logger.info("Cancelled after dispatching {} file(s)", discovered)

        logger.debug("Walker exhausted: dispatched={}", discovered)
        for _ in range(self.workers):
            await intake.put(None)

    async def _work(
        self,
        intake: "asyncio.Queue[WorkItem | None]",
        results: "asyncio.Queue[object]",
        executor: ThreadPoolExecutor,
        in_flight: InFlightCounter,
        cancel: asyncio.Event | None,
    ) -> None:
        loop = asyncio.get_running_loop()
        while True:
            item = await intake.get()
            if item is None:
                return

            try:
                if cancel is not None and cancel.is_set():
                    logger.debug("Dropping cancelled item: {}", item.path)
                    continue

                result = await loop.run_in_executor(
                    executor, self.processor.process, item.path, item.digest_factory
                )
                await results.put(result)
            finally:
                in_flight.decrement()

    async def _finish(
        self,
        feeder: asyncio.Task[None],
        workers: list[asyncio.Task[None]],
        results: "asyncio.Queue[object]",
        in_flight: InFlightCounter,
    ) -> None:
        """Close the result stream once feeder and workers are done.

        A feeder or worker exception still closes the stream and is
        re-raised to the consumer. Cancellation propagates without
        closing, since nobody is reading anymore.
        """
        failure: Exception | None = None
        try:
            await asyncio.gather(feeder, *workers)
        except Exception as e:
            logger.error("Worker pool failed: {}", e)
            failure = e
        else:
            if not in_flight.idle:
                logger.error("Pool finished with {} item(s) in flight", in_flight.value)

        await results.put(_DONE)
        if failure is not None:
            raise failure
