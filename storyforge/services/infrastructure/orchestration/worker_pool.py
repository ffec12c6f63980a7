"""
Bounded worker pool for independent per-item jobs (image generation).
"""

import asyncio
from typing import Awaitable, Callable, Dict, Hashable, Iterable, TypeVar

from ....core import get_logger

logger = get_logger(__name__, component="worker_pool")

K = TypeVar("K", bound=Hashable)
R = TypeVar("R")


async def bounded_map(
    keys: Iterable[K],
    worker: Callable[[K], Awaitable[R]],
    limit: int,
) -> Dict[K, R]:
    """Run ``worker(key)`` for every key with at most ``limit`` in flight.

    Results are keyed by input, never by completion order. The first worker
    exception propagates; other in-flight workers are cancelled. Side effects
    they already made durable are kept.
    """
    semaphore = asyncio.Semaphore(max(1, limit))
    keys = list(keys)

    async def run(key: K) -> R:
        async with semaphore:
            return await worker(key)

    tasks = {key: asyncio.ensure_future(run(key)) for key in keys}
    try:
        await asyncio.gather(*tasks.values())
    except BaseException:
        for task in tasks.values():
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks.values(), return_exceptions=True)
        raise

    return {key: task.result() for key, task in tasks.items()}
