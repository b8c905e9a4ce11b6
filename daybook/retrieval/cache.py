"""
Record Cache

Time-boxed memoization of the full record set.

CRITICAL: Only the reload entry point touches the cache, never a batch
task, so "last write wins" is the only consistency rule needed.
"""

import time
from typing import Awaitable, Callable, Optional

from daybook.models.ledger import TransactionRecord


class RecordCache:
    """
    Holds the last loaded record set for `ttl_seconds`.
    """

    def __init__(
        self,
        ttl_seconds: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._ttl = ttl_seconds
        self._clock = clock
        self._records: Optional[list[TransactionRecord]] = None
        self._loaded_at: Optional[float] = None

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def is_valid(self) -> bool:
        if self._records is None or self._loaded_at is None:
            return False
        return (self._clock() - self._loaded_at) <= self._ttl

    def get(self) -> Optional[list[TransactionRecord]]:
        """Cached records if still fresh, else None."""
        return list(self._records) if self.is_valid() else None

    def last_known(self) -> Optional[list[TransactionRecord]]:
        """Cached records regardless of age (for failure fallback)."""
        return list(self._records) if self._records is not None else None

    def store(self, records: list[TransactionRecord]) -> None:
        self._records = list(records)
        self._loaded_at = self._clock()

    def invalidate(self) -> None:
        """Mark the records stale; they stay available to last_known()."""
        self._loaded_at = None

    def clear(self) -> None:
        self._records = None
        self._loaded_at = None

    async def get_or_recompute(
        self,
        compute: Callable[[], Awaitable[list[TransactionRecord]]],
    ) -> tuple[list[TransactionRecord], bool]:
        """
        Return fresh cached records, or compute, store and return new ones.

        Returns:
            (records, served_from_cache)

        Exceptions from `compute` propagate and leave the cache untouched.
        """
        cached = self.get()
        if cached is not None:
            return cached, True

        records = await compute()
        self.store(records)
        return list(records), False
