"""
Tests for storyforge.services.infrastructure.logs

Live fan-out and the persisted activity log.
"""

import asyncio

import pytest

from storyforge.models.entities import LogEntry, LogLevel
from storyforge.services.infrastructure.logs import ActivityLog, LogBroadcaster


def _entry(project_id="p1", code="STAGE_STARTED"):
    return LogEntry(project_id=project_id, level=LogLevel.INFO, code=code, message=code.lower())


@pytest.mark.asyncio
class TestLogBroadcaster:

    async def test_publish_reaches_only_matching_project(self):
        broadcaster = LogBroadcaster()
        mine = broadcaster.subscribe("p1")
        other = broadcaster.subscribe("p2")

        broadcaster.publish(_entry("p1"))

        assert mine.qsize() == 1
        assert other.qsize() == 0

    async def test_full_queue_drops_without_raising(self):
        broadcaster = LogBroadcaster(max_queue_size=1)
        queue = broadcaster.subscribe("p1")
        broadcaster.publish(_entry(code="A"))
        broadcaster.publish(_entry(code="B"))

        assert queue.qsize() == 1
        assert queue.get_nowait().code == "A"

    async def test_stream_yields_until_closed(self):
        broadcaster = LogBroadcaster()
        received = []

        async def consume():
            async for item in broadcaster.stream("p1"):
                received.append(item.code)

        task = asyncio.create_task(consume())
        while broadcaster.subscriber_count("p1") == 0:
            await asyncio.sleep(0)
        broadcaster.publish(_entry(code="A"))
        broadcaster.publish(_entry(code="B"))
        broadcaster.close("p1")
        await asyncio.wait_for(task, timeout=1)

        assert received == ["A", "B"]
        assert broadcaster.subscriber_count("p1") == 0

    async def test_stream_heartbeat(self):
        broadcaster = LogBroadcaster()
        stream = broadcaster.stream("p1", heartbeat_seconds=0.01)

        assert await stream.__anext__() is None
        await stream.aclose()
        assert broadcaster.subscriber_count("p1") == 0


class TestActivityLog:

    def test_record_persists_and_drops_none_meta(self, store, make_project):
        project = make_project()
        activity = ActivityLog(store, LogBroadcaster())

        entry = activity.error(project.id, "GENERATION_FAILED", "boom", stage="audio", scene=None)

        assert entry.meta == {"stage": "audio"}
        persisted = store.list_logs(project.id)
        assert persisted[-1].level is LogLevel.ERROR
        assert persisted[-1].meta == {"stage": "audio"}

    def test_broadcast_failure_does_not_lose_entry(self, store, make_project):
        class BrokenBroadcaster(LogBroadcaster):
            def publish(self, entry):
                raise RuntimeError("socket gone")

        project = make_project()
        ActivityLog(store, BrokenBroadcaster()).info(project.id, "PROJECT_STARTED", "started")

        assert [e.code for e in store.list_logs(project.id)] == ["PROJECT_STARTED"]
