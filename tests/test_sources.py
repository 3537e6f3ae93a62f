"""Tests for source readers and template suggestion."""

import logging
from pathlib import Path

import pytest

from extractflow.core.config import Config
from extractflow.core.errors import UnsupportedSourceError
from extractflow.core.models import ExtractionTemplate, SourceInput, SourceType
from extractflow.services.sources import (
    PASTED_TEXT_NAME,
    read_file,
    read_source,
    read_text,
    read_url,
    suggest_template,
)

ACCEPTED = [".txt", ".md", ".pdf", ".docx"]


class TestReadText:
    def test_strips_and_names_pasted_text(self) -> None:
        content = read_text("  hello world \n", max_length=100)

        assert content.content == "hello world"
        assert content.source_name == PASTED_TEXT_NAME
        assert content.source_type == SourceType.TEXT

    def test_truncates_long_text(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="extractflow.services.sources"):
            content = read_text("a" * 120, max_length=100)

        assert len(content.content) == 100
        assert "truncating" in caplog.text


class TestReadFile:
    def test_reads_accepted_file(self, tmp_path: Path) -> None:
        path = tmp_path / "episode_transcript.TXT"
        path.write_text("Welcome to the show.", encoding="utf-8")

        content = read_file(path, ACCEPTED)

        assert content.content == "Welcome to the show."
        assert content.source_name == "episode_transcript.TXT"
        assert content.source_type == SourceType.FILE

    def test_rejects_unknown_suffix(self, tmp_path: Path) -> None:
        path = tmp_path / "audio.mp3"
        path.write_bytes(b"\x00\x01")

        with pytest.raises(UnsupportedSourceError, match="Unsupported file type '.mp3'"):
            read_file(path, ACCEPTED)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(UnsupportedSourceError, match="Could not read"):
            read_file(tmp_path / "missing.md", ACCEPTED)

    def test_undecodable_bytes_are_replaced(self, tmp_path: Path) -> None:
        path = tmp_path / "scan.pdf"
        path.write_bytes(b"%PDF-1.4 \xff\xfe text")

        content = read_file(path, ACCEPTED)

        assert content.content.startswith("%PDF-1.4")
        assert "�" in content.content


class TestReadUrl:
    def test_passes_url_through(self) -> None:
        content = read_url(" https://example.com/episode ")

        assert content.content == "https://example.com/episode"
        assert content.source_name == "https://example.com/episode"
        assert content.source_type == SourceType.URL


class TestReadSource:
    def test_dispatches_text_with_configured_limit(self) -> None:
        config = Config()
        config.extraction.max_text_length = 5

        content = read_source(SourceInput(SourceType.TEXT, "abcdefgh"), config)

        assert content.content == "abcde"

    def test_dispatches_file(self, tmp_path: Path) -> None:
        path = tmp_path / "notes.md"
        path.write_text("# Notes")

        content = read_source(SourceInput(SourceType.FILE, str(path)), Config())

        assert content.source_name == "notes.md"


class TestSuggestTemplate:
    @pytest.fixture
    def templates(self) -> list[ExtractionTemplate]:
        return [
            ExtractionTemplate(id="t1", name="Article", content_type="article"),
            ExtractionTemplate(id="t2", name="Transcript", content_type="transcript"),
            ExtractionTemplate(id="t3", name="Transcript v2", content_type="transcript"),
        ]

    def test_transcript_file_gets_first_transcript_template(
        self, templates: list[ExtractionTemplate]
    ) -> None:
        suggested = suggest_template("Episode-12-TRANSCRIPT.txt", templates)

        assert suggested is not None
        assert suggested.id == "t2"

    def test_other_files_get_no_suggestion(self, templates: list[ExtractionTemplate]) -> None:
        assert suggest_template("show-notes.md", templates) is None

    def test_no_transcript_template(self) -> None:
        templates = [ExtractionTemplate(id="t1", name="Article", content_type="article")]
        assert suggest_template("transcript.txt", templates) is None
