"""Parallel upload utilities."""
import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def get_parallel_count(avg_size: float) -> int:
    """
    Get parallel upload count based on average file size.

    Small images benefit from more parallelism; large ones saturate the
    uplink quickly.
    """
    MB = 1024 * 1024

    if avg_size < 0.5 * MB:
        return 8  # Small files: high parallelism
    elif avg_size < 2 * MB:
        return 4  # Medium files: moderate parallelism
    else:
        return 2  # Large files: low parallelism


async def run_bounded(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    concurrency: Optional[int] = None,
) -> List[R]:
    """
    Run ``worker`` over ``items`` with at most ``concurrency`` in flight.

    Items are fed through a queue to a fixed set of workers. The returned
    list is index-aligned with ``items`` regardless of completion order.
    ``worker`` must not raise; failures are its own outcome values.
    """
    if not items:
        return []

    limit = len(items) if not concurrency or concurrency < 1 else min(concurrency, len(items))
    queue: "asyncio.Queue[int]" = asyncio.Queue()
    for idx in range(len(items)):
        queue.put_nowait(idx)

    results: List[Optional[R]] = [None] * len(items)

    async def _drain(worker_id: int) -> None:
        while True:
            try:
                idx = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            try:
                results[idx] = await worker(items[idx])
            finally:
                queue.task_done()

    logger.debug(f"Running {len(items)} task(s) on {limit} worker(s)")
    await asyncio.gather(*(_drain(n) for n in range(limit)))
    return results  # type: ignore[return-value]
