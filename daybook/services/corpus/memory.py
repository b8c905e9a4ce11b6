"""
In-Memory Corpus Implementation

A dictionary-backed corpus and search facility. Used by tests and by
hosts that already hold their notes in memory.

Failures can be injected per document (read errors), for the whole
listing, or for search, to exercise the fallback paths.
"""

from typing import Optional

from daybook.services.corpus.interface import (
    CorpusError,
    DocumentHandle,
    DocumentReadError,
    SearchFacilityInterface,
    SearchHit,
    SearchUnavailableError,
    WritableCorpusInterface,
)


class InMemoryCorpus(WritableCorpusInterface):
    """
    Documents kept in a {path: text} dictionary.
    """

    def __init__(self, documents: Optional[dict[str, str]] = None):
        self._documents: dict[str, str] = dict(documents or {})
        self._unreadable: set[str] = set()
        self._listing_error: Optional[str] = None
        self.read_count = 0

    def fail_reads_for(self, *paths: str) -> None:
        """Make read_document raise for these paths."""
        self._unreadable.update(paths)

    def fail_listing(self, message: str = "listing unavailable") -> None:
        """Make list_documents raise."""
        self._listing_error = message

    @staticmethod
    def _handle(path: str) -> DocumentHandle:
        return DocumentHandle(identity=path.rsplit("/", 1)[-1], path=path)

    async def list_documents(self, path_prefix: str) -> list[DocumentHandle]:
        if self._listing_error:
            raise CorpusError(self._listing_error)
        prefix = path_prefix.strip("/")
        return [
            self._handle(path)
            for path in sorted(self._documents)
            if not prefix or path == prefix or path.startswith(f"{prefix}/")
        ]

    async def read_document(self, handle: DocumentHandle) -> str:
        self.read_count += 1
        if handle.path in self._unreadable:
            raise DocumentReadError(handle.path, f"Injected read failure: {handle.path}")
        try:
            return self._documents[handle.path]
        except KeyError:
            raise DocumentReadError(handle.path, f"No such document: {handle.path}")

    async def document_exists(self, path: str) -> bool:
        path = path.strip("/")
        if not path or path in self._documents:
            return True
        folder = f"{path}/"
        return any(p.startswith(folder) for p in self._documents)

    async def write_document(self, path: str, content: str) -> DocumentHandle:
        self._documents[path] = content
        return self._handle(path)

    def content_of(self, path: str) -> Optional[str]:
        return self._documents.get(path)


class InMemorySearchFacility(SearchFacilityInterface):
    """
    Substring search over an InMemoryCorpus.

    With `available=False` every query raises SearchUnavailableError.
    """

    def __init__(self, corpus: InMemoryCorpus, available: bool = True):
        self._corpus = corpus
        self._available = available
        self.queries: list[str] = []

    async def search(self, term: str, scoped_path: str) -> list[SearchHit]:
        self.queries.append(term)
        if not self._available:
            raise SearchUnavailableError("Search index is not ready")

        hits = []
        for handle in await self._corpus.list_documents(scoped_path):
            text = self._corpus.content_of(handle.path) or ""
            if term in text:
                hits.append(SearchHit(document_path=handle.path))
        return hits
