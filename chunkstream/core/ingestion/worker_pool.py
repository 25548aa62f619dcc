"""
Worker pool.

Each worker claims an item from the shared backlog, fetches it, runs the
extractor and pushes every unit into the fan-in buffer as soon as the
extractor yields it. A failing item is logged and recorded and the worker
moves on; units it pushed before the failure stay delivered, and a failure
while opening the item yields no units at all. Workers stop when the backlog
is empty, when claiming fails, or when the run is cancelled. In every case
they report completion to the buffer exactly once.

Dependencies: threading
System role: Concurrent fan-out over the backlog
"""

import logging
import threading
import time

from chunkstream.core.exceptions import BacklogClosedError, PipelineCancelledError
from chunkstream.core.ingestion.backlog import Backlog
from chunkstream.core.ingestion.fan_in import FanInBuffer
from chunkstream.core.ingestion.models import ItemFailure
from chunkstream.core.ingestion.tasks.base import ContentFetcher, UnitExtractor
from chunkstream.observability.log_utils import log_exception_with_context, log_with_context

logger = logging.getLogger(__name__)


class RunStats:
    """Per-run counters shared by all workers."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.items_processed = 0
        self.units_pushed = 0
        self.failures: list[ItemFailure] = []

    def record_success(self, item_id: str, unit_count: int) -> None:
        with self._lock:
            self.items_processed += 1
            self.units_pushed += unit_count

    def record_failure(self, item_id: str, exc: BaseException, unit_count: int = 0) -> None:
        with self._lock:
            self.units_pushed += unit_count
            self.failures.append(
                ItemFailure(
                    item_id=item_id,
                    error_type=type(exc).__name__,
                    message=str(exc),
                    units_pushed=unit_count,
                )
            )

    @property
    def items_failed(self) -> int:
        with self._lock:
            return len(self.failures)

    def snapshot_failures(self) -> list[ItemFailure]:
        with self._lock:
            return list(self.failures)


class Worker:
    """One claim-fetch-extract-push loop."""

    def __init__(
        self,
        worker_id: int,
        backlog: Backlog,
        buffer: FanInBuffer,
        fetcher: ContentFetcher,
        extractor: UnitExtractor,
        stats: RunStats,
        cancel_event: threading.Event,
    ) -> None:
        self._worker_id = worker_id
        self._backlog = backlog
        self._buffer = buffer
        self._fetcher = fetcher
        self._extractor = extractor
        self._stats = stats
        self._cancel_event = cancel_event

    def run(self) -> None:
        """Process items until the backlog is empty or the run is cancelled."""
        claimed = 0
        succeeded = 0
        try:
            while not self._cancel_event.is_set():
                try:
                    item_id = self._backlog.claim_next()
                except BacklogClosedError:
                    logger.debug(f"{__name__}:run - Worker {self._worker_id} saw closed backlog")
                    break
                except Exception as e:
                    log_exception_with_context(
                        logger,
                        f"{__name__}:run - Worker {self._worker_id} failed to claim, stopping",
                        e,
                        worker_id=self._worker_id,
                    )
                    break

                if item_id is None:
                    break
                claimed += 1
                if self._process(item_id):
                    succeeded += 1
        except PipelineCancelledError:
            logger.debug(f"{__name__}:run - Worker {self._worker_id} cancelled while pushing")
        finally:
            self._buffer.mark_worker_done()
            logger.debug(
                f"{__name__}:run - Worker {self._worker_id} claimed {claimed} items, "
                f"{succeeded} succeeded"
            )

    def _process(self, item_id: str) -> bool:
        """
        Stream one item's units into the buffer.

        Returns:
            bool: True when the item was extracted to the end

        Raises:
            PipelineCancelledError: When the run is cancelled mid-push
        """
        start_time = time.perf_counter()
        pushed = 0
        try:
            with self._fetcher.fetch(item_id) as pieces:
                for unit in self._extractor.extract(item_id, pieces):
                    self._buffer.push(unit)
                    pushed += 1
        except PipelineCancelledError:
            raise
        except Exception as e:
            self._stats.record_failure(item_id, e, pushed)
            log_exception_with_context(
                logger,
                f"{__name__}:_process - Failed to process item {item_id} after {pushed} units",
                e,
                item_id=item_id,
                worker_id=self._worker_id,
                unit_count=pushed,
            )
            return False

        self._stats.record_success(item_id, pushed)
        log_with_context(
            logger,
            logging.DEBUG,
            f"{__name__}:_process - Pushed {pushed} units from {item_id}",
            item_id=item_id,
            worker_id=self._worker_id,
            unit_count=pushed,
            elapsed_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )
        return True


class WorkerPool:
    """Fixed-size pool of worker threads sharing one backlog and one buffer."""

    def __init__(
        self,
        worker_count: int,
        backlog: Backlog,
        buffer: FanInBuffer,
        fetcher: ContentFetcher,
        extractor: UnitExtractor,
        stats: RunStats,
        name_prefix: str = "chunkstream-worker",
    ) -> None:
        """
        Initialize worker pool.

        Args:
            worker_count: Number of worker threads, must match the buffer's producer count
            backlog: Shared backlog the workers claim from
            buffer: Fan-in buffer the workers push into
            fetcher: Opens item content
            extractor: Turns item content into units
            stats: Shared run counters
            name_prefix: Thread name prefix

        Raises:
            ValueError: When worker_count is not positive or disagrees with the buffer
        """
        if worker_count < 1:
            raise ValueError(f"worker_count must be positive, got {worker_count}")
        if worker_count != buffer.producer_count:
            raise ValueError(
                f"worker_count {worker_count} != buffer producer_count {buffer.producer_count}"
            )

        self._cancel_event = threading.Event()
        self._threads = [
            threading.Thread(
                target=Worker(
                    worker_id=index,
                    backlog=backlog,
                    buffer=buffer,
                    fetcher=fetcher,
                    extractor=extractor,
                    stats=stats,
                    cancel_event=self._cancel_event,
                ).run,
                name=f"{name_prefix}-{index}",
                daemon=True,
            )
            for index in range(worker_count)
        ]
        self._started = False

    def start(self) -> None:
        """Start every worker thread. A pool starts once."""
        if self._started:
            return
        self._started = True
        for thread in self._threads:
            thread.start()

    def cancel(self) -> None:
        """Ask workers to stop before claiming another item."""
        self._cancel_event.set()

    def join(self, timeout: float | None = None) -> bool:
        """
        Wait for workers to exit.

        Args:
            timeout: Overall seconds to wait, None to wait forever

        Returns:
            bool: True when every worker has exited
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        for thread in self._threads:
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            thread.join(remaining)
        return not self.alive

    @property
    def alive(self) -> int:
        """Number of worker threads still running."""
        return sum(1 for thread in self._threads if thread.is_alive())

    @property
    def size(self) -> int:
        return len(self._threads)

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()
