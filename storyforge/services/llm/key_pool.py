"""
API key pool

Hands out configured keys round-robin. ``call`` runs one request with the
next key and, when the provider rejects that key, moves on to the following
one, going at most once around the pool.
"""

import threading
from typing import Awaitable, Callable, Iterable, TypeVar

from ...core import FatalProviderError, get_logger

logger = get_logger(__name__, component="key_pool")

T = TypeVar("T")


class ApiKeyPool:
    def __init__(self, keys: Iterable[str], provider: str):
        self.keys = [key for key in keys if key]
        self.provider = provider
        self._index = 0
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self.keys)

    def next_key(self) -> str:
        if not self.keys:
            raise FatalProviderError(f"No API key configured for {self.provider}", provider=self.provider)
        with self._lock:
            key = self.keys[self._index]
            self._index = (self._index + 1) % len(self.keys)
        return key

    async def call(
        self,
        operation: Callable[[str], Awaitable[T]],
        key_rejected: Callable[[Exception], bool],
    ) -> T:
        """Run ``operation(key)``; on a rejected key retry with the next one.

        Errors that ``key_rejected`` does not claim, and the rejection from
        the last untried key, propagate unchanged.
        """
        remaining = len(self.keys)
        while True:
            key = self.next_key()
            remaining -= 1
            try:
                return await operation(key)
            except Exception as exc:  # noqa: BLE001
                if remaining <= 0 or not key_rejected(exc):
                    raise
                logger.warning(
                    f"{self.provider} key ending {key[-4:]} rejected, trying the next key",
                    extra={"provider": self.provider, "error": str(exc)},
                )
