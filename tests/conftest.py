"""
Shared test fixtures and configuration for entire test suite.

Provides: In-memory item sources, sample document directories, fast pipeline
settings, S3 client mocks, settings cache isolation
Dependencies: pytest, botocore
System role: Test infrastructure and fixture management
"""

import logging
import threading
import time
from collections import Counter
from contextlib import contextmanager
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from chunkstream.configs import PipelineSettings, get_settings
from chunkstream.core.exceptions import ItemFetchError
from chunkstream.core.ingestion import IngestionPipeline


class InMemorySource:
    """Item source backed by a dict, optionally slow or failing per item."""

    def __init__(
        self,
        contents: dict[str, str],
        piece_size: int | None = None,
        failing: tuple[str, ...] = (),
        delay: float = 0.0,
    ) -> None:
        self._contents = contents
        self._piece_size = piece_size
        self._failing = set(failing)
        self._delay = delay
        self._lock = threading.Lock()
        self.fetch_counts: Counter[str] = Counter()

    def describe(self) -> str:
        return "memory://test"

    def list_items(self) -> list[str]:
        return list(self._contents)

    @contextmanager
    def fetch(self, item_id: str):
        with self._lock:
            self.fetch_counts[item_id] += 1
        if self._delay:
            time.sleep(self._delay)
        if item_id in self._failing:
            raise ItemFetchError("Simulated fetch failure", item_id=item_id)

        text = self._contents[item_id]
        size = self._piece_size or max(len(text), 1)
        yield (text[i : i + size] for i in range(0, len(text), size))


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Isolate environment-driven settings between tests."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def restore_root_logging():
    """Restore root handlers replaced by configure_logging."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


@pytest.fixture
def memory_source():
    """Factory for InMemorySource instances."""
    return InMemorySource


@pytest.fixture
def pipeline_settings() -> PipelineSettings:
    """Pipeline settings with short polling and bounded joins."""
    return PipelineSettings(worker_count=4, put_poll_interval=0.01, join_timeout=5.0)


@pytest.fixture
def pipeline(pipeline_settings) -> IngestionPipeline:
    return IngestionPipeline(pipeline_settings)


@pytest.fixture
def documents_dir(tmp_path: Path) -> Path:
    """
    Create a directory with plain-text, markdown and unrelated files.

    Returns:
        Path: Directory containing notes.txt, extra.txt, guide.md, data.json and a subdirectory
    """
    (tmp_path / "notes.txt").write_text("line1\nline2\n\nline3\n", encoding="utf-8")
    (tmp_path / "extra.txt").write_text("alpha\r\n\r\nbeta\r\n", encoding="utf-8")
    (tmp_path / "guide.md").write_text(
        "# H1\nbody text\n\n```js\ncode\n```\n\n## Usage\n\n- install\n- run\n",
        encoding="utf-8",
    )
    (tmp_path / "data.json").write_text("{}", encoding="utf-8")
    (tmp_path / "nested").mkdir()
    (tmp_path / "nested" / "inner.txt").write_text("ignored\n", encoding="utf-8")
    return tmp_path


def make_body(*chunks: bytes) -> MagicMock:
    """Mock a botocore StreamingBody yielding the given chunks."""
    body = MagicMock()
    body.iter_chunks.return_value = iter(chunks)
    return body


@pytest.fixture
def s3_body():
    """Factory for mocked S3 streaming bodies."""
    return make_body


@pytest.fixture
def mock_s3_client():
    """
    Create mock boto3 S3 client serving an in-memory bucket.

    Returns:
        MagicMock: Client with list_objects_v2 and get_object; call
            ``serve(objects)`` to load {key: bytes}
    """
    client = MagicMock()
    store: dict[str, bytes] = {}

    def list_objects_v2(**kwargs):
        prefix = kwargs.get("Prefix", "")
        keys = [key for key in store if key.startswith(prefix)]
        return {
            "Contents": [{"Key": key, "Size": len(store[key])} for key in keys],
            "IsTruncated": False,
        }

    def get_object(Bucket, Key):
        if Key not in store:
            raise ClientError({"Error": {"Code": "NoSuchKey", "Message": "missing"}}, "GetObject")
        return {"Body": make_body(store[Key])}

    def serve(objects: dict[str, bytes]) -> None:
        store.clear()
        store.update(objects)

    client.list_objects_v2.side_effect = list_objects_v2
    client.get_object.side_effect = get_object
    client.serve = serve
    return client
