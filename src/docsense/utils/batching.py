"""Fixed-size batching helpers."""

from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

T = TypeVar("T")
R = TypeVar("R")


def chunk(items: Sequence[T], size: int) -> list[list[T]]:
    """Split items into consecutive chunks of ``size``; the last may be shorter."""
    if size < 1:
        raise ValueError(f"Chunk size must be at least 1, got {size}")
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


async def process_sequentially(
    items: Sequence[T],
    size: int,
    fn: Callable[[list[T]], Awaitable[list[R]]],
) -> list[R]:
    """
    Run ``fn`` over chunks of ``items`` one chunk at a time.

    Each chunk is awaited before the next starts, so only one batch is
    in flight against the model endpoint.

    Args:
        items: Items to process
        size: Chunk size
        fn: Coroutine function called with each chunk

    Returns:
        Concatenated results in input order
    """
    results: list[R] = []
    for batch in chunk(items, size):
        results.extend(await fn(batch))
    return results
