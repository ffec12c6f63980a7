"""
Bounded retry with growing delay for transient provider failures.
"""

import asyncio
from typing import Awaitable, Callable, Optional, Tuple, Type, TypeVar

from .exceptions import TransientProviderError
from .logging import get_logger

logger = get_logger(__name__, component="retry")

T = TypeVar("T")


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    *,
    attempts: int,
    base_delay: float,
    description: str = "operation",
    retry_on: Tuple[Type[BaseException], ...] = (TransientProviderError,),
    on_retry: Optional[Callable[[int, BaseException], None]] = None,
) -> T:
    """Run ``operation`` up to ``attempts`` times.

    Only exceptions listed in ``retry_on`` are retried; anything else
    (including FatalProviderError) propagates on the first occurrence.
    The delay before attempt ``n + 1`` is ``base_delay * n``.
    """
    attempts = max(1, attempts)
    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except retry_on as exc:
            if attempt >= attempts:
                logger.error(
                    f"{description} failed after {attempts} attempts",
                    extra={"attempts": attempts, "error": str(exc)},
                )
                raise
            delay = base_delay * attempt
            logger.warning(
                f"{description} failed (attempt {attempt}/{attempts}), retrying in {delay:.1f}s",
                extra={"attempt": attempt, "error": str(exc)},
            )
            if on_retry is not None:
                on_retry(attempt, exc)
            if delay > 0:
                await asyncio.sleep(delay)

    raise AssertionError("unreachable")
