"""
Bounded-Concurrency Batching

Documents are processed in fixed-size batches: every task of a batch runs
concurrently, and the next batch starts only when the whole batch is done.

CRITICAL: Workers own their error handling. Each worker returns its own
result and nothing is shared between tasks; results are merged only after
the batch completes.
"""

import asyncio
from typing import Awaitable, Callable, Sequence, TypeVar


T = TypeVar("T")
R = TypeVar("R")


def chunked(items: Sequence[T], size: int) -> list[Sequence[T]]:
    """Split `items` into consecutive slices of at most `size` items."""
    if size < 1:
        raise ValueError("Batch size must be at least 1")
    return [items[i:i + size] for i in range(0, len(items), size)]


async def run_in_batches(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    batch_size: int,
) -> list[R]:
    """
    Run `worker` over `items`, `batch_size` at a time.

    Results come back in input order.
    """
    results: list[R] = []
    for batch in chunked(items, batch_size):
        results.extend(await asyncio.gather(*(worker(item) for item in batch)))
    return results
