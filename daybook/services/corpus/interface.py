"""
Abstract Corpus Interface

DESIGN DECISION: The journal folder is reached only through these
interfaces. This allows us to:
1. Read a plain directory of markdown notes
2. Use in-memory storage for testing (with failure injection)
3. Plug in a host application's own note store

Search is a separate, optional capability. A host either hands in a
SearchFacilityInterface or it does not; there is no probing for methods.
"""

from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel, ConfigDict


class DocumentHandle(BaseModel):
    """
    A document in the corpus.

    `identity` is the file name (e.g. "2024-03-10.md"),
    `path` the full corpus path (e.g. "journals/2024/2024-03-10.md").
    """
    model_config = ConfigDict(frozen=True)

    identity: str
    path: str


class SearchHit(BaseModel):
    """One document reported by a search facility."""
    model_config = ConfigDict(frozen=True)

    document_path: str


class CorpusInterface(ABC):
    """
    Read access to the document store.
    """

    @abstractmethod
    async def list_documents(self, path_prefix: str) -> list[DocumentHandle]:
        """
        List every document whose path starts with `path_prefix`.

        Raises:
            CorpusError: If the listing itself fails
        """
        pass

    @abstractmethod
    async def read_document(self, handle: DocumentHandle) -> str:
        """
        Read a document's full text.

        Raises:
            DocumentReadError: If the document cannot be read
        """
        pass

    @abstractmethod
    async def document_exists(self, path: str) -> bool:
        """True if a document or folder exists at `path`."""
        pass

    async def get_document(self, path: str) -> Optional[DocumentHandle]:
        """Handle for `path`, or None if nothing exists there."""
        if not await self.document_exists(path):
            return None
        return DocumentHandle(identity=path.rsplit("/", 1)[-1], path=path)


class WritableCorpusInterface(CorpusInterface):
    """
    A corpus that also accepts writes (used by quick entry only).
    """

    @abstractmethod
    async def write_document(self, path: str, content: str) -> DocumentHandle:
        """
        Create or replace the document at `path`.

        Raises:
            DocumentWriteError: If the write fails
        """
        pass


class SearchFacilityInterface(ABC):
    """
    Optional full-text search over the corpus.
    """

    @abstractmethod
    async def search(self, term: str, scoped_path: str) -> list[SearchHit]:
        """
        Find documents containing `term` under `scoped_path`.

        Raises:
            SearchUnavailableError: If the facility cannot serve queries
        """
        pass


class CorpusError(Exception):
    """Base exception for corpus operations."""
    pass


class DocumentReadError(CorpusError):
    """A single document could not be read."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(message)


class DocumentWriteError(CorpusError):
    """A document could not be written."""
    pass


class CorpusRootMissingError(CorpusError):
    """The configured journal folder does not exist."""

    def __init__(self, root: str):
        self.root = root
        super().__init__(f"Journal folder not found: {root}")


class SearchUnavailableError(Exception):
    """The search facility is absent or cannot serve queries."""
    pass
