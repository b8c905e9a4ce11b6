"""Document retrieval package."""

from daybook.retrieval.batching import chunked, run_in_batches
from daybook.retrieval.cache import RecordCache
from daybook.retrieval.locator import (
    DocumentLocator,
    LocatorError,
    LocatorResult,
    is_dated_identity,
    is_within,
)
from daybook.retrieval.reader import CorpusReader, sort_newest_first

__all__ = [
    "CorpusReader",
    "DocumentLocator",
    "LocatorError",
    "LocatorResult",
    "RecordCache",
    "chunked",
    "is_dated_identity",
    "is_within",
    "run_in_batches",
    "sort_newest_first",
]
