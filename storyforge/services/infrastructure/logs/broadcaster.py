"""
Log broadcaster - per-project fan-out of log entries to live subscribers.

Publishing never blocks and never fails the caller: a subscriber whose
queue is full simply misses entries (it can always re-read the persisted
log).
"""

import asyncio
from collections import defaultdict
from typing import AsyncIterator, Dict, Optional, Set

from ....core import get_logger
from ....models.entities import LogEntry

logger = get_logger(__name__, component="log_broadcaster")

_CLOSED = None


class LogBroadcaster:
    def __init__(self, max_queue_size: int = 1000):
        self._max_queue_size = max_queue_size
        self._subscribers: Dict[str, Set[asyncio.Queue]] = defaultdict(set)

    def subscribe(self, project_id: str) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._max_queue_size)
        self._subscribers[project_id].add(queue)
        return queue

    def unsubscribe(self, project_id: str, queue: asyncio.Queue) -> None:
        subscribers = self._subscribers.get(project_id)
        if not subscribers:
            return
        subscribers.discard(queue)
        if not subscribers:
            self._subscribers.pop(project_id, None)

    def subscriber_count(self, project_id: str) -> int:
        return len(self._subscribers.get(project_id, ()))

    def publish(self, entry: LogEntry) -> None:
        for queue in list(self._subscribers.get(entry.project_id, ())):
            try:
                queue.put_nowait(entry)
            except asyncio.QueueFull:
                logger.warning(
                    "Dropping log entry for slow subscriber",
                    extra={"project_id": entry.project_id, "code": entry.code},
                )

    def close(self, project_id: str) -> None:
        """Signal end-of-stream to every subscriber of ``project_id``."""
        for queue in list(self._subscribers.get(project_id, ())):
            try:
                queue.put_nowait(_CLOSED)
            except asyncio.QueueFull:
                pass

    async def stream(
        self,
        project_id: str,
        heartbeat_seconds: Optional[float] = None,
    ) -> AsyncIterator[Optional[LogEntry]]:
        """Yield entries as they are published until the stream is closed.

        With ``heartbeat_seconds`` set, ``None`` is yielded whenever that long
        passes without an entry so transports can keep the connection alive.
        """
        queue = self.subscribe(project_id)
        try:
            while True:
                try:
                    if heartbeat_seconds is None:
                        item = await queue.get()
                    else:
                        item = await asyncio.wait_for(queue.get(), timeout=heartbeat_seconds)
                except asyncio.TimeoutError:
                    yield None
                    continue
                if item is _CLOSED:
                    return
                yield item
        finally:
            self.unsubscribe(project_id, queue)


_broadcaster_instance: Optional[LogBroadcaster] = None


def get_log_broadcaster() -> LogBroadcaster:
    global _broadcaster_instance
    if _broadcaster_instance is None:
        _broadcaster_instance = LogBroadcaster()
    return _broadcaster_instance
