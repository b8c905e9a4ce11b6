"""
Corpus Services Package

Provides abstract interfaces and concrete implementations for reaching the
journal documents. Ships a file system backend and an in-memory backend.
"""

from daybook.services.corpus.interface import (
    CorpusError,
    CorpusInterface,
    CorpusRootMissingError,
    DocumentHandle,
    DocumentReadError,
    DocumentWriteError,
    SearchFacilityInterface,
    SearchHit,
    SearchUnavailableError,
    WritableCorpusInterface,
)
from daybook.services.corpus.filesystem import FileSystemCorpus
from daybook.services.corpus.memory import InMemoryCorpus, InMemorySearchFacility

__all__ = [
    # Interfaces
    "CorpusInterface",
    "SearchFacilityInterface",
    "WritableCorpusInterface",
    "DocumentHandle",
    "SearchHit",
    # Exceptions
    "CorpusError",
    "CorpusRootMissingError",
    "DocumentReadError",
    "DocumentWriteError",
    "SearchUnavailableError",
    # Implementations
    "FileSystemCorpus",
    "InMemoryCorpus",
    "InMemorySearchFacility",
]
