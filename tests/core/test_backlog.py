"""Tests for the shared backlog."""

import threading

import pytest

from chunkstream.core.exceptions import BacklogClosedError
from chunkstream.core.ingestion.backlog import Backlog


class TestBacklog:
    """Test claim-once semantics of Backlog."""

    def test_claims_in_order(self) -> None:
        """Should serve identifiers in population order."""
        backlog = Backlog(["a", "b", "c"])

        assert [backlog.claim_next() for _ in range(3)] == ["a", "b", "c"]

    def test_empty_returns_none(self) -> None:
        """Should return None once every identifier is claimed."""
        backlog = Backlog(["a"])
        backlog.claim_next()

        assert backlog.claim_next() is None
        assert backlog.claim_next() is None

    def test_counters(self) -> None:
        """Should track total, remaining and claimed counts."""
        backlog = Backlog(["a", "b", "c"])
        backlog.claim_next()

        assert backlog.total == 3
        assert backlog.remaining == 2
        assert len(backlog) == 2
        assert backlog.claimed == 1
        assert backlog.claim_counts == {"a": 1}

    def test_concurrent_claims_are_unique(self) -> None:
        """Should hand each identifier to exactly one of many threads."""
        items = [f"item-{i}" for i in range(2000)]
        backlog = Backlog(items)
        claimed: list[list[str]] = [[] for _ in range(8)]

        def claim_all(index: int) -> None:
            while (item_id := backlog.claim_next()) is not None:
                claimed[index].append(item_id)

        threads = [threading.Thread(target=claim_all, args=(i,)) for i in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        flattened = [item for chunk in claimed for item in chunk]
        assert sorted(flattened) == sorted(items)
        assert set(backlog.claim_counts.values()) == {1}
        assert backlog.remaining == 0

    def test_close_rejects_claims(self) -> None:
        """Should raise BacklogClosedError after close."""
        backlog = Backlog(["a", "b"])
        backlog.close()

        with pytest.raises(BacklogClosedError):
            backlog.claim_next()
        assert backlog.remaining == 0
        assert backlog.total == 2

    def test_close_is_idempotent(self) -> None:
        """Should allow closing twice."""
        backlog = Backlog(["a"])
        backlog.close()
        backlog.close()

        assert backlog.claimed == 0
