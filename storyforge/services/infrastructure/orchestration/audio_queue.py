"""
Audio Queue - process-wide FIFO that serializes speech synthesis.

Each entry is one project's whole audio batch. Entries run strictly one at a
time in submission order, so synthesis calls from different projects never
overlap. The pending list and the processing flag are private; callers only
see ``enqueue``.
"""

import asyncio
from collections import deque
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Deque, Optional, TypeVar

from ....core import get_logger

logger = get_logger(__name__, component="audio_queue")

T = TypeVar("T")


@dataclass
class _QueuedTask:
    key: str
    task: Callable[[], Awaitable[Any]]
    future: asyncio.Future


class AudioQueue:
    def __init__(self):
        self._pending: Deque[_QueuedTask] = deque()
        self._processing = False
        self._runner: Optional[asyncio.Task] = None

    @property
    def queue_length(self) -> int:
        return len(self._pending)

    @property
    def is_processing(self) -> bool:
        return self._processing

    async def enqueue(self, key: str, task: Callable[[], Awaitable[T]]) -> T:
        """Append ``task`` to the queue and wait for its result.

        Args:
            key: Grouping identifier, used for logging (e.g. ``project-<id>-audio``)
            task: Zero-argument coroutine factory; called when the entry reaches the head

        Returns:
            Whatever ``task`` returns. Its exception, if any, is re-raised here.
        """
        loop = asyncio.get_running_loop()
        future = loop.create_future()
        self._pending.append(_QueuedTask(key=key, task=task, future=future))
        logger.info(
            "Audio batch queued",
            extra={"queue_key": key, "queue_length": len(self._pending), "processing": self._processing},
        )

        if not self._processing:
            self._processing = True
            self._runner = loop.create_task(self._drain())

        return await future

    async def _drain(self) -> None:
        try:
            while self._pending:
                item = self._pending.popleft()
                if item.future.cancelled():
                    continue
                logger.info("Audio batch started", extra={"queue_key": item.key, "remaining": len(self._pending)})
                try:
                    result = await item.task()
                except Exception as exc:  # noqa: BLE001
                    logger.warning("Audio batch failed", extra={"queue_key": item.key, "error": str(exc)})
                    if not item.future.done():
                        item.future.set_exception(exc)
                else:
                    logger.info("Audio batch finished", extra={"queue_key": item.key})
                    if not item.future.done():
                        item.future.set_result(result)
        finally:
            self._processing = False
            self._runner = None


_audio_queue_instance: Optional[AudioQueue] = None


def get_audio_queue() -> AudioQueue:
    """Get the shared AudioQueue instance (singleton pattern)."""
    global _audio_queue_instance
    if _audio_queue_instance is None:
        _audio_queue_instance = AudioQueue()
    return _audio_queue_instance
