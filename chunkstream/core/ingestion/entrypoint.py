"""
Ingestion pipeline driver.

Wires backlog, worker pool and fan-in buffer together and hands the caller a
lazy, single-pass sequence of units. Starting a run never blocks: workers run
in background threads and only the consumer's reads wait. A completion thread
joins the workers so the run's report is final once they have all exited.
Neither the workers nor the completion thread hold the run itself, so a run
dropped without being iterated is garbage collected and cancelled.

Dependencies: All ingestion modules, configs
System role: Pipeline orchestration (coordinates only)
"""

import logging
import threading
import time
import weakref
from collections.abc import Callable, Iterable, Iterator

from chunkstream.configs import PipelineSettings, get_settings
from chunkstream.core.exceptions import PipelineStateError, SourceListingError
from chunkstream.core.ingestion.backlog import Backlog
from chunkstream.core.ingestion.fan_in import FanInBuffer
from chunkstream.core.ingestion.models import PipelineReport, Unit
from chunkstream.core.ingestion.tasks.base import ContentFetcher, ItemSource, UnitExtractor
from chunkstream.core.ingestion.worker_pool import RunStats, WorkerPool

logger = logging.getLogger(__name__)


class _RunTiming:
    """Start time and final elapsed time, shared with the completion thread."""

    __slots__ = ("start_time", "elapsed_ms")

    def __init__(self) -> None:
        self.start_time = time.perf_counter()
        self.elapsed_ms: float | None = None


def _await_workers(
    pool: WorkerPool, stats: RunStats, timing: _RunTiming, finished: threading.Event
) -> None:
    pool.join()
    timing.elapsed_ms = (time.perf_counter() - timing.start_time) * 1000
    finished.set()
    logger.info(
        f"{__name__}:_await_workers - Workers finished: "
        f"{stats.items_processed} processed, {stats.items_failed} failed, "
        f"{stats.units_pushed} units in {timing.elapsed_ms:.1f}ms"
    )


def _cancel_run(pool: WorkerPool, backlog: Backlog, buffer: FanInBuffer) -> None:
    """Stop workers claiming, discard buffered units and release blocked producers."""
    if buffer.exhausted:
        return
    if not buffer.cancelled:
        logger.info(
            f"{__name__}:_cancel_run - Cancelling run with {backlog.remaining} items unclaimed"
        )
    pool.cancel()
    backlog.close()
    buffer.close()


class PipelineRun:
    """
    One running pipeline.

    Iterate it once to receive every unit. Leaving the loop early, calling
    close(), exiting a ``with`` block or dropping the run cancels it: workers
    finish the item in hand and stop before claiming another.
    """

    def __init__(
        self,
        items: Iterable[str],
        extractor: UnitExtractor,
        fetcher: ContentFetcher,
        worker_count: int,
        buffer_size: int = 0,
        put_poll_interval: float = 0.5,
        join_timeout: float | None = None,
    ) -> None:
        """
        Populate the backlog and start the workers.

        Args:
            items: Item identifiers, claimed in this order
            extractor: Turns one item's content into units
            fetcher: Opens one item's content
            worker_count: Number of concurrent workers
            buffer_size: Fan-in bound, 0 for unbounded
            put_poll_interval: Seconds between cancellation checks for blocked producers
            join_timeout: Seconds close() waits for workers, None to wait forever
        """
        self._backlog = Backlog(items)
        self._buffer = FanInBuffer(
            worker_count, maxsize=buffer_size, put_poll_interval=put_poll_interval
        )
        self._stats = RunStats()
        self._pool = WorkerPool(
            worker_count=worker_count,
            backlog=self._backlog,
            buffer=self._buffer,
            fetcher=fetcher,
            extractor=extractor,
            stats=self._stats,
        )
        self._join_timeout = join_timeout
        self._consumed = False
        self._finished = threading.Event()
        self._timing = _RunTiming()

        logger.info(
            f"{__name__}:PipelineRun - Starting {worker_count} workers "
            f"over {self._backlog.total} items"
        )
        self._pool.start()
        self._completion = threading.Thread(
            target=_await_workers,
            args=(self._pool, self._stats, self._timing, self._finished),
            name="chunkstream-completion",
            daemon=True,
        )
        self._completion.start()
        # Runs from the garbage collector when the run is dropped unconsumed
        self._finalizer = weakref.finalize(
            self, _cancel_run, self._pool, self._backlog, self._buffer
        )
        self._finalizer.atexit = False

    def __iter__(self) -> Iterator[Unit]:
        if self._consumed:
            raise PipelineStateError("A pipeline run can only be iterated once")
        self._consumed = True
        return self._iterate()

    def _iterate(self) -> Iterator[Unit]:
        try:
            yield from self._buffer
        finally:
            if not self._buffer.exhausted:
                # Abandoned mid-sequence, possibly from a garbage collector
                self.close(wait=False)

    def drain(self, handler: Callable[[Unit], None]) -> PipelineReport:
        """
        Pass every unit to a handler, then return the report.

        Args:
            handler: Called once per unit, on the caller's thread

        Returns:
            PipelineReport: Final report of the run
        """
        for unit in self:
            handler(unit)
        return self.report()

    def close(self, wait: bool = True) -> None:
        """
        Cancel the run.

        Args:
            wait: Block until workers exit (bounded by join_timeout)
        """
        if self._buffer.exhausted:
            return
        _cancel_run(self._pool, self._backlog, self._buffer)
        if wait and not self._pool.join(self._join_timeout):
            logger.warning(
                f"{__name__}:close - {self._pool.alive} workers still running after "
                f"{self._join_timeout}s"
            )

    def report(self, timeout: float | None = None) -> PipelineReport:
        """
        Summarise the run.

        Args:
            timeout: Seconds to wait for workers to exit, None to wait forever

        Returns:
            PipelineReport: Counts, failures and timing

        Raises:
            PipelineStateError: When the run is still producing, or workers
                did not exit within timeout
        """
        if not (self._buffer.exhausted or self._buffer.cancelled):
            raise PipelineStateError("Drain or close the run before requesting its report")
        if not self._finished.wait(timeout):
            raise PipelineStateError(
                "Workers are still running", {"alive": self._pool.alive}
            )

        return PipelineReport(
            items_total=self._backlog.total,
            items_claimed=self._backlog.claimed,
            items_processed=self._stats.items_processed,
            items_failed=self._stats.items_failed,
            units_emitted=self._buffer.delivered,
            worker_count=self._pool.size,
            cancelled=self._buffer.cancelled and not self._buffer.exhausted,
            failures=self._stats.snapshot_failures(),
            processing_time_ms=self._timing.elapsed_ms or 0.0,
        )

    @property
    def exhausted(self) -> bool:
        """True once every unit has been delivered and all workers are done."""
        return self._buffer.exhausted

    @property
    def backlog(self) -> Backlog:
        return self._backlog

    def __enter__(self) -> "PipelineRun":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class IngestionPipeline:
    """Start pipeline runs with configured worker and buffer settings."""

    def __init__(self, settings: PipelineSettings | None = None) -> None:
        """
        Initialize pipeline with configuration.

        Args:
            settings: Pipeline settings (uses application settings if None)
        """
        self._settings = settings or get_settings().pipeline

    @property
    def settings(self) -> PipelineSettings:
        return self._settings

    def run(
        self,
        items: Iterable[str],
        extractor: UnitExtractor,
        fetcher: ContentFetcher,
        worker_count: int | None = None,
    ) -> PipelineRun:
        """
        Start a run over known item identifiers.

        Args:
            items: Item identifiers, claimed in this order
            extractor: Turns one item's content into units
            fetcher: Opens one item's content
            worker_count: Pool size (settings default if None)

        Returns:
            PipelineRun: Lazy unit sequence; workers are already running

        Raises:
            ValueError: When worker_count is not positive
        """
        count = self._settings.worker_count if worker_count is None else worker_count
        if count < 1:
            raise ValueError(f"worker_count must be positive, got {count}")

        return PipelineRun(
            items=items,
            extractor=extractor,
            fetcher=fetcher,
            worker_count=count,
            buffer_size=self._settings.buffer_size,
            put_poll_interval=self._settings.put_poll_interval,
            join_timeout=self._settings.join_timeout,
        )

    def ingest(
        self,
        source: ItemSource,
        extractor: UnitExtractor,
        suffix: str | None = None,
        worker_count: int | None = None,
    ) -> PipelineRun:
        """
        List a source, keep identifiers ending in suffix, and start a run.

        Listing happens before any worker starts, so a listing failure
        reaches the caller and no run is created.

        Args:
            source: Lists and fetches items
            extractor: Turns one item's content into units
            suffix: Identifier suffix filter such as ".md" (no filter if None)
            worker_count: Pool size (settings default if None)

        Returns:
            PipelineRun: Lazy unit sequence

        Raises:
            SourceListingError: When the source cannot be listed
        """
        try:
            items = source.list_items()
        except SourceListingError:
            raise
        except Exception as e:
            raise SourceListingError(
                f"Failed to list source: {e}", source=source.describe()
            ) from e

        if suffix:
            items = [item for item in items if item.endswith(suffix)]

        logger.info(
            f"{__name__}:ingest - {len(items)} items matching {suffix or '*'} "
            f"in {source.describe()}"
        )
        return self.run(items, extractor, source, worker_count)
