"""
Shared backlog of unclaimed item identifiers.

Workers claim one identifier at a time. Claiming is atomic, so no two workers
ever observe the same "next" item, and the backlog only ever shrinks.

Dependencies: threading, collections
System role: Work distribution for the worker pool
"""

import logging
import threading
from collections import Counter, deque
from collections.abc import Iterable

from chunkstream.core.exceptions import BacklogClosedError

logger = logging.getLogger(__name__)


class Backlog:
    """Thread-safe FIFO of item identifiers with claim-once semantics."""

    def __init__(self, items: Iterable[str]) -> None:
        """
        Populate the backlog once, before any worker starts.

        Args:
            items: Item identifiers in the order they should be served
        """
        self._items: deque[str] = deque(items)
        self._total = len(self._items)
        self._lock = threading.Lock()
        self._claims: Counter[str] = Counter()
        self._closed = False

    def claim_next(self) -> str | None:
        """
        Remove and return the next identifier.

        Returns:
            str | None: Claimed identifier, or None when the backlog is empty

        Raises:
            BacklogClosedError: When the backlog was closed
        """
        with self._lock:
            if self._closed:
                raise BacklogClosedError("Backlog is closed")
            if not self._items:
                return None
            item_id = self._items.popleft()
            self._claims[item_id] += 1
            return item_id

    def close(self) -> None:
        """Refuse further claims. Unclaimed identifiers are dropped."""
        with self._lock:
            if not self._closed:
                logger.debug(
                    f"{__name__}:close - Closing backlog with {len(self._items)} unclaimed items"
                )
            self._closed = True
            self._items.clear()

    @property
    def total(self) -> int:
        """Number of identifiers the backlog was populated with."""
        return self._total

    @property
    def remaining(self) -> int:
        """Number of identifiers not yet claimed."""
        with self._lock:
            return len(self._items)

    @property
    def claimed(self) -> int:
        """Number of successful claims so far."""
        with self._lock:
            return sum(self._claims.values())

    @property
    def claim_counts(self) -> dict[str, int]:
        """Snapshot of how many times each identifier was claimed."""
        with self._lock:
            return dict(self._claims)

    def __len__(self) -> int:
        return self.remaining
