"""
Tests for the file system corpus (run against tmp_path).
"""

import asyncio
import pytest

from daybook.services.corpus import (
    CorpusError,
    DocumentHandle,
    DocumentReadError,
    FileSystemCorpus,
)


@pytest.fixture
def vault(tmp_path):
    journals = tmp_path / "journals"
    (journals / "2024").mkdir(parents=True)
    (journals / "2024-03-10.md").write_text("- #cy 50 lunch\n", encoding="utf-8")
    (journals / "2024" / "2024-03-11.md").write_text("- #gw 5 pen\n", encoding="utf-8")
    (journals / "image.png").write_bytes(b"\x89PNG")
    (tmp_path / ".trash").mkdir()
    (tmp_path / ".trash" / "2024-01-01.md").write_text("- #cy 1 old", encoding="utf-8")
    return tmp_path


class TestFileSystemCorpus:
    """Tests for reading and writing a journal directory."""

    def test_list_documents(self, vault):
        corpus = FileSystemCorpus(vault)
        handles = asyncio.run(corpus.list_documents("journals"))
        assert [h.path for h in handles] == [
            "journals/2024-03-10.md",
            "journals/2024/2024-03-11.md",
        ]
        assert handles[1].identity == "2024-03-11.md"

    def test_list_whole_vault_skips_hidden_folders(self, vault):
        corpus = FileSystemCorpus(vault)
        paths = [h.path for h in asyncio.run(corpus.list_documents(""))]
        assert ".trash/2024-01-01.md" not in paths
        assert len(paths) == 2

    def test_missing_prefix_lists_nothing(self, vault):
        assert asyncio.run(FileSystemCorpus(vault).list_documents("nope")) == []

    def test_read_document(self, vault):
        corpus = FileSystemCorpus(vault)
        handle = DocumentHandle(identity="2024-03-10.md", path="journals/2024-03-10.md")
        assert asyncio.run(corpus.read_document(handle)) == "- #cy 50 lunch\n"

    def test_read_missing_document(self, vault):
        corpus = FileSystemCorpus(vault)
        handle = DocumentHandle(identity="gone.md", path="journals/gone.md")
        with pytest.raises(DocumentReadError) as exc_info:
            asyncio.run(corpus.read_document(handle))
        assert exc_info.value.path == "journals/gone.md"

    def test_path_escape_rejected(self, vault):
        corpus = FileSystemCorpus(vault / "journals")
        handle = DocumentHandle(identity="secret.md", path="../secret.md")
        with pytest.raises(CorpusError):
            asyncio.run(corpus.read_document(handle))
        assert asyncio.run(corpus.document_exists("../secret.md")) is False

    def test_document_exists(self, vault):
        corpus = FileSystemCorpus(vault)
        assert asyncio.run(corpus.document_exists("journals")) is True
        assert asyncio.run(corpus.document_exists("journals/2024-03-10.md")) is True
        assert asyncio.run(corpus.document_exists("diary")) is False

    def test_get_document(self, vault):
        corpus = FileSystemCorpus(vault)
        handle = asyncio.run(corpus.get_document("journals/2024-03-10.md"))
        assert handle == DocumentHandle(identity="2024-03-10.md", path="journals/2024-03-10.md")
        assert asyncio.run(corpus.get_document("journals/missing.md")) is None

    def test_invalid_path_does_not_exist(self, vault):
        """Paths the file system cannot represent are reported as absent."""
        corpus = FileSystemCorpus(vault)
        assert asyncio.run(corpus.document_exists("journals/bad\x00name.md")) is False
        assert asyncio.run(corpus.get_document("journals/bad\x00name.md")) is None

    def test_write_creates_folders(self, vault):
        corpus = FileSystemCorpus(vault)
        handle = asyncio.run(corpus.write_document("diary/2024-03-15.md", "- #cy 5"))
        assert handle.path == "diary/2024-03-15.md"
        assert (vault / "diary" / "2024-03-15.md").read_text(encoding="utf-8") == "- #cy 5"

    def test_custom_extensions(self, vault):
        (vault / "journals" / "2024-03-12.txt").write_text("- #cy 5", encoding="utf-8")
        corpus = FileSystemCorpus(vault, extensions=[".txt"])
        paths = [h.path for h in asyncio.run(corpus.list_documents("journals"))]
        assert paths == ["journals/2024-03-12.txt"]
