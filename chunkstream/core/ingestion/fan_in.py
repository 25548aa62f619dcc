"""
Fan-in buffer and completion tracking.

Many worker threads push units into one FIFO; a single consumer pulls them
lazily. Each worker finishes by enqueueing a completion marker behind its own
last unit, so the consumer can only count the final marker after it has
already dequeued every unit pushed before it. End-of-sequence is therefore
observed exactly when all workers are done and the buffer is empty.

The buffer is unbounded by default. With a bound, producers wait for space
but re-check cancellation periodically, so a consumer that walks away never
leaves workers blocked forever.

Dependencies: queue, threading
System role: Many-producer / single-consumer hand-off for the worker pool
"""

import logging
import queue
import threading
from collections.abc import Iterator

from chunkstream.core.exceptions import PipelineCancelledError, PipelineStateError
from chunkstream.core.ingestion.models import Unit

logger = logging.getLogger(__name__)

_WORKER_DONE = object()
_CLOSED = object()


class FanInBuffer:
    """FIFO shared by N producers and exactly one consumer."""

    def __init__(
        self,
        producer_count: int,
        maxsize: int = 0,
        put_poll_interval: float = 0.5,
    ) -> None:
        """
        Initialize fan-in buffer.

        Args:
            producer_count: Number of workers that will call mark_worker_done
            maxsize: Maximum buffered units, 0 for unbounded
            put_poll_interval: Seconds between cancellation checks while a
                producer waits for space

        Raises:
            ValueError: When producer_count is not positive
        """
        if producer_count < 1:
            raise ValueError(f"producer_count must be positive, got {producer_count}")

        self._producer_count = producer_count
        self._put_poll_interval = put_poll_interval
        self._queue: queue.Queue = queue.Queue(maxsize=maxsize)

        self._state_lock = threading.Lock()
        self._workers_done = 0
        self._pushed = 0

        # Consumer-side state, touched only while holding _consumer_lock
        self._consumer_lock = threading.Lock()
        self._markers_seen = 0
        self._delivered = 0

        self._exhausted = threading.Event()
        self._cancelled = threading.Event()

    # ------------------------------------------------------------------
    # Producer side
    # ------------------------------------------------------------------

    def push(self, unit: Unit) -> None:
        """
        Append a unit and wake the consumer.

        Safe to call from any worker thread.

        Args:
            unit: Fully constructed unit

        Raises:
            PipelineCancelledError: When the consumer closed the buffer
        """
        self._put(unit)
        with self._state_lock:
            self._pushed += 1

    def mark_worker_done(self) -> None:
        """
        Record that one worker has finished.

        Must be called once per worker, after that worker's last push.

        Raises:
            PipelineStateError: When called more times than there are producers
        """
        with self._state_lock:
            if self._workers_done >= self._producer_count:
                raise PipelineStateError(
                    "mark_worker_done called more often than there are workers",
                    {"producer_count": self._producer_count},
                )
            self._workers_done += 1
            workers_done = self._workers_done

        logger.debug(
            f"{__name__}:mark_worker_done - {workers_done}/{self._producer_count} workers done"
        )
        try:
            self._put(_WORKER_DONE)
        except PipelineCancelledError:
            # Nobody is left to read the marker
            pass

    def _put(self, entry: object) -> None:
        while True:
            if self._cancelled.is_set():
                raise PipelineCancelledError("Consumer closed the fan-in buffer")
            try:
                self._queue.put(entry, timeout=self._put_poll_interval)
                return
            except queue.Full:
                continue

    # ------------------------------------------------------------------
    # Consumer side
    # ------------------------------------------------------------------

    def next_unit(self, timeout: float | None = None) -> Unit | None:
        """
        Pop the next unit, waiting while the buffer is empty and work remains.

        Args:
            timeout: Seconds to wait for a single queue read, None to wait forever

        Returns:
            Unit | None: Next unit, or None at end-of-sequence

        Raises:
            PipelineStateError: When a second consumer calls concurrently
            TimeoutError: When timeout elapses with nothing to return
        """
        if not self._consumer_lock.acquire(blocking=False):
            raise PipelineStateError("Fan-in buffer supports a single consumer")
        try:
            while True:
                if self._exhausted.is_set() or self._cancelled.is_set():
                    return None

                try:
                    entry = self._queue.get(timeout=timeout)
                except queue.Empty:
                    raise TimeoutError(f"No unit available within {timeout}s") from None

                if entry is _CLOSED or self._cancelled.is_set():
                    return None

                if entry is _WORKER_DONE:
                    self._markers_seen += 1
                    if self._markers_seen == self._producer_count:
                        self._exhausted.set()
                        logger.debug(
                            f"{__name__}:next_unit - All workers done, "
                            f"{self._delivered} units delivered"
                        )
                        return None
                    continue

                self._delivered += 1
                return entry
        finally:
            self._consumer_lock.release()

    def __iter__(self) -> Iterator[Unit]:
        while True:
            unit = self.next_unit()
            if unit is None:
                return
            yield unit

    def close(self) -> None:
        """
        Abandon the sequence.

        Cancels pending and future pushes, discards buffered units and wakes a
        consumer blocked in next_unit.
        """
        if self._cancelled.is_set():
            return
        self._cancelled.set()

        discarded = 0
        while True:
            try:
                entry = self._queue.get_nowait()
            except queue.Empty:
                break
            if entry is not _WORKER_DONE and entry is not _CLOSED:
                discarded += 1

        try:
            self._queue.put_nowait(_CLOSED)
        except queue.Full:
            # A producer refilled the slot; the consumer wakes on that entry
            pass

        if discarded:
            logger.info(f"{__name__}:close - Discarded {discarded} undelivered units")

    # ------------------------------------------------------------------
    # Completion tracking
    # ------------------------------------------------------------------

    @property
    def exhausted(self) -> bool:
        """True once every worker finished and the consumer drained the buffer."""
        return self._exhausted.is_set()

    @property
    def cancelled(self) -> bool:
        """True once the buffer was closed by the consumer side."""
        return self._cancelled.is_set()

    @property
    def workers_done(self) -> int:
        """Number of workers that have called mark_worker_done."""
        with self._state_lock:
            return self._workers_done

    @property
    def producer_count(self) -> int:
        return self._producer_count

    @property
    def pushed(self) -> int:
        """Units accepted from producers."""
        with self._state_lock:
            return self._pushed

    @property
    def delivered(self) -> int:
        """Units handed to the consumer."""
        return self._delivered

    @property
    def pending(self) -> int:
        """Approximate number of buffered entries, markers included."""
        return self._queue.qsize()
