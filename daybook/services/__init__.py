"""Services package."""

from daybook.services.corpus import (
    CorpusError,
    CorpusInterface,
    CorpusRootMissingError,
    DocumentHandle,
    DocumentReadError,
    DocumentWriteError,
    FileSystemCorpus,
    InMemoryCorpus,
    InMemorySearchFacility,
    SearchFacilityInterface,
    SearchHit,
    SearchUnavailableError,
    WritableCorpusInterface,
)
from daybook.services.notifications import (
    CollectingNotifier,
    LoggingNotifier,
    Notifier,
)

__all__ = [
    # Corpus
    "CorpusError",
    "CorpusInterface",
    "CorpusRootMissingError",
    "DocumentHandle",
    "DocumentReadError",
    "DocumentWriteError",
    "FileSystemCorpus",
    "InMemoryCorpus",
    "InMemorySearchFacility",
    "SearchFacilityInterface",
    "SearchHit",
    "SearchUnavailableError",
    "WritableCorpusInterface",
    # Notifications
    "CollectingNotifier",
    "LoggingNotifier",
    "Notifier",
]
