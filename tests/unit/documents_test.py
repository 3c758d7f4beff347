"""Unit tests for document identifiers and the file-backed document source."""

from pathlib import Path

import pytest

from go_to_java.core.documents import (
    FileDocumentSource,
    document_id,
    document_path,
    is_go_file,
    iter_go_files,
    snippet_id,
)


class TestIdentifiers:
    def test_document_id_round_trips_to_path(self, tmp_path: Path) -> None:
        path = tmp_path / "dir with space" / "main.go"
        assert document_id(path).startswith("file://")
        assert document_path(document_id(path)) == path.resolve()

    def test_snippet_has_no_path(self) -> None:
        assert snippet_id() == "untitled:snippet.go"
        assert document_path(snippet_id()) is None

    def test_is_go_file(self) -> None:
        assert is_go_file(Path("a/b.go"))
        assert not is_go_file(Path("a/b.py"))


class TestIterGoFiles:
    def test_skips_vendor_and_hidden_directories(self, tmp_path: Path) -> None:
        for relative in ["main.go", "pkg/util.go", "vendor/dep/dep.go", ".git/x.go", "testdata/t.go", "README.md"]:
            path = tmp_path / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("package x\n")

        found = [p.relative_to(tmp_path).as_posix() for p in iter_go_files(tmp_path)]
        assert found == ["main.go", "pkg/util.go"]


class TestFileDocumentSource:
    @pytest.mark.asyncio
    async def test_reads_from_disk(self, tmp_path: Path) -> None:
        path = tmp_path / "main.go"
        path.write_text("package main\n")
        assert await FileDocumentSource().read_text(document_id(path)) == "package main\n"

    @pytest.mark.asyncio
    async def test_open_buffer_shadows_disk(self, tmp_path: Path) -> None:
        path = tmp_path / "main.go"
        path.write_text("package main\n")
        source = FileDocumentSource()
        source.open(document_id(path), "package edited\n")
        assert source.is_open(document_id(path))
        assert await source.read_text(document_id(path)) == "package edited\n"

        source.close(document_id(path))
        assert await source.read_text(document_id(path)) == "package main\n"

    @pytest.mark.asyncio
    async def test_unknown_snippet_raises(self) -> None:
        with pytest.raises(FileNotFoundError):
            await FileDocumentSource().read_text(snippet_id("missing"))
