"""
Tests for storyforge.services.infrastructure.orchestration.sweeper
"""

import asyncio
from datetime import datetime, timedelta

import pytest

from storyforge.models.status import ProjectStatus
from storyforge.services.infrastructure.orchestration import StuckProjectSweeper


class TestStuckProjectSweeper:

    def test_marks_stale_projects_failed(self, store, activity, make_project):
        old = (datetime.now() - timedelta(minutes=45)).isoformat()
        stuck = make_project(status=ProjectStatus.MEDIA_READY, updated_at=old)
        fresh = make_project(status=ProjectStatus.MEDIA_READY)

        summary = StuckProjectSweeper(store, activity, timeout_minutes=30).run_once()

        assert summary["marked_failed"] == [stuck.id]
        failed = store.get(stuck.id)
        assert failed.status is ProjectStatus.FAILED
        assert "stuck in media_ready for more than 30 minutes" in failed.error
        assert store.get(fresh.id).status is ProjectStatus.MEDIA_READY

        entry = store.list_logs(stuck.id)[-1]
        assert entry.code == "PROCESS_STUCK"
        assert entry.meta["still_running"] is False

    def test_reports_running_generation(self, store, activity, make_project):
        old = (datetime.now() - timedelta(hours=1)).isoformat()
        stuck = make_project(status=ProjectStatus.CREATED, updated_at=old)

        StuckProjectSweeper(store, activity, is_running=lambda pid: pid == stuck.id).run_once()

        assert store.list_logs(stuck.id)[-1].meta["still_running"] is True

    @pytest.mark.asyncio
    async def test_disabled_sweeper_returns_immediately(self, store, activity):
        sweeper = StuckProjectSweeper(store, activity, enabled=False)
        await asyncio.wait_for(sweeper.run_periodic(), timeout=1)
