"""Tests for document readers over local and S3 sources."""

import pytest

from chunkstream.core.ingestion import (
    DocumentReader,
    IngestionPipeline,
    Paragraph,
    SectionChunk,
    create_local_reader,
    create_s3_reader,
)
from chunkstream.core.ingestion.tasks import LocalDirectorySource, S3Source


class TestLocalReader:
    """Test DocumentReader over a local directory."""

    def test_list_files(self, documents_dir, pipeline) -> None:
        """Should list every file, unfiltered."""
        reader = create_local_reader(str(documents_dir), pipeline=pipeline)

        assert reader.list_files() == ["data.json", "extra.txt", "guide.md", "notes.txt"]
        assert isinstance(reader.source, LocalDirectorySource)

    def test_read_txt_files(self, documents_dir, pipeline) -> None:
        """Should read paragraphs from .txt files only."""
        reader = create_local_reader(str(documents_dir), pipeline=pipeline)

        units = list(reader.read_txt_files())

        assert all(isinstance(unit, Paragraph) for unit in units)
        assert sorted((unit.item_id, unit.text) for unit in units) == [
            ("extra.txt", "alpha"),
            ("extra.txt", "beta"),
            ("notes.txt", "line1 line2"),
            ("notes.txt", "line3"),
        ]

    def test_read_md_files(self, documents_dir, pipeline) -> None:
        """Should read sections from .md files only."""
        reader = create_local_reader(str(documents_dir), pipeline=pipeline)

        units = list(reader.read_md_files(worker_count=1))

        assert all(isinstance(unit, SectionChunk) for unit in units)
        assert [(unit.heading, unit.level, unit.body) for unit in units] == [
            ("H1", 1, "body text\n"),
            ("Usage", 2, "- install\n- run\n"),
        ]
        assert units[0].code_blocks[0].language == "js"

    def test_suffix_override(self, documents_dir, pipeline) -> None:
        """Should read other suffixes when asked."""
        reader = create_local_reader(str(documents_dir), pipeline=pipeline)

        units = list(reader.read("paragraph", suffix=".json"))

        assert [(unit.item_id, unit.text) for unit in units] == [("data.json", "{}")]

    def test_unknown_kind(self, documents_dir, pipeline) -> None:
        """Should reject an unknown unit kind."""
        reader = create_local_reader(str(documents_dir), pipeline=pipeline)

        with pytest.raises(ValueError):
            reader.read("sentence")

    def test_directory_from_settings(self, documents_dir, monkeypatch) -> None:
        """Should fall back to LOCAL_SOURCE_DIRECTORY."""
        monkeypatch.setenv("LOCAL_SOURCE_DIRECTORY", str(documents_dir))

        reader = create_local_reader()

        assert reader.source.describe() == str(documents_dir)

    def test_suffixes_from_settings(self, documents_dir, monkeypatch) -> None:
        """Should honour configured suffixes."""
        monkeypatch.setenv("LOCAL_SOURCE_TXT_SUFFIX", ".json")

        reader = create_local_reader(str(documents_dir))
        units = list(reader.read_txt_files())

        assert [unit.item_id for unit in units] == ["data.json"]


class TestS3Reader:
    """Test DocumentReader over an S3 prefix."""

    def test_read_md_files(self, mock_s3_client, pipeline) -> None:
        """Should stream sections from markdown objects."""
        mock_s3_client.serve(
            {
                "notes/a.md": b"# A\nalpha\n",
                "notes/b.txt": b"plain\n",
                "other/c.md": b"# C\ngamma\n",
            }
        )
        reader = create_s3_reader(
            "bucket", prefix="notes/", pipeline=pipeline, client=mock_s3_client
        )

        units = list(reader.read_md_files())

        assert [(unit.item_id, unit.heading) for unit in units] == [("notes/a.md", "A")]
        assert isinstance(reader.source, S3Source)

    def test_read_txt_files(self, mock_s3_client, pipeline) -> None:
        """Should stream paragraphs from text objects."""
        mock_s3_client.serve({"t/one.txt": b"x\ny\n\nz\n", "t/two.txt": "café\n".encode()})
        reader = create_s3_reader("bucket", prefix="t/", pipeline=pipeline, client=mock_s3_client)

        units = list(reader.read_txt_files())

        assert sorted(unit.text for unit in units) == ["café", "x y", "z"]

    def test_bucket_and_prefix_from_settings(self, mock_s3_client, monkeypatch) -> None:
        """Should fall back to configured bucket and prefix."""
        monkeypatch.setenv("S3_SOURCE_BUCKET", "configured-bucket")
        monkeypatch.setenv("S3_SOURCE_PREFIX", "docs/")

        reader = create_s3_reader(client=mock_s3_client)

        assert reader.source.describe() == "s3://configured-bucket/docs/"

    def test_suffixes_from_s3_settings(self, mock_s3_client, pipeline, monkeypatch) -> None:
        """Should filter keys by S3_SOURCE_ suffixes, not the local ones."""
        monkeypatch.setenv("S3_SOURCE_MD_SUFFIX", ".markdown")
        monkeypatch.setenv("LOCAL_SOURCE_MD_SUFFIX", ".md")
        mock_s3_client.serve(
            {
                "d/a.markdown": b"# A\nalpha\n",
                "d/b.md": b"# B\nbeta\n",
            }
        )
        reader = create_s3_reader("bucket", prefix="d/", pipeline=pipeline, client=mock_s3_client)

        units = list(reader.read_md_files())

        assert [(unit.item_id, unit.heading) for unit in units] == [("d/a.markdown", "A")]

    def test_reader_accepts_any_source(self, memory_source) -> None:
        """Should work with any object that lists and fetches items."""
        reader = DocumentReader(
            memory_source({"a.txt": "one\n\ntwo\n"}),
            pipeline=IngestionPipeline(),
        )

        assert [unit.text for unit in reader.read_txt_files(worker_count=1)] == ["one", "two"]
