"""
Tests for storyforge.services.infrastructure.storage.project_repository

File-backed persistence of projects, scenes and log entries.
"""

import json
from datetime import datetime, timedelta

import pytest

from storyforge.core import PipelineInvariantError, ProjectNotFoundError
from storyforge.models.entities import AnimationPlan, LogEntry, LogLevel, ProsodySegment, ShowAnimation
from storyforge.models.status import ProjectStatus
from storyforge.services.infrastructure.storage import ProjectStore


class TestProjectPersistence:

    def test_create_writes_project_file(self, store, make_project, tmp_path):
        project = make_project()
        project_file = tmp_path / "project_data" / project.id / "project.json"

        assert project_file.exists()
        data = json.loads(project_file.read_text(encoding="utf-8"))
        assert data["slug"] == project.slug
        assert data["status"] == "created"

    def test_duplicate_id_rejected(self, store, make_project):
        project = make_project()
        with pytest.raises(PipelineInvariantError):
            store.create(project)

    def test_reload_from_disk(self, make_project, tmp_path):
        project = make_project(topic="Storm")
        fresh = ProjectStore(tmp_path / "project_data")

        loaded = fresh.get(project.id)
        assert loaded is not None
        assert loaded.topic == "Storm"

    def test_get_unknown_returns_none(self, store):
        assert store.get("nope") is None
        assert not store.exists("nope")

    def test_readers_get_copies(self, store, make_project):
        project = make_project()
        copy = store.get(project.id)
        copy.topic = "Changed locally"
        assert store.get(project.id).topic == "Lighthouse"

    def test_update_project_rejects_unknown_fields(self, store, make_project):
        project = make_project()
        with pytest.raises(PipelineInvariantError):
            store.update_project(project.id, colour="blue")

    def test_update_missing_project(self, store):
        with pytest.raises(ProjectNotFoundError):
            store.update_project("missing", title="x")

    def test_list_all_newest_first(self, store, make_project):
        first = make_project(created_at="2024-01-01T00:00:00")
        second = make_project(created_at="2024-02-01T00:00:00")
        assert [p.id for p in store.list_all()] == [second.id, first.id]

    def test_slug_taken(self, store, make_project):
        make_project(slug="lighthouse")
        assert store.slug_taken("lighthouse")
        assert not store.slug_taken("harbour")


class TestStatusTransitions:

    def test_forward_move(self, store, make_project):
        project = make_project()
        assert store.set_status(project.id, ProjectStatus.METADATA_READY) is True
        assert store.get(project.id).status is ProjectStatus.METADATA_READY

    def test_same_status_is_noop(self, store, make_project):
        project = make_project()
        assert store.set_status(project.id, ProjectStatus.CREATED) is False

    def test_skipping_ahead_allowed(self, store, make_project):
        project = make_project()
        assert store.set_status(project.id, ProjectStatus.MEDIA_READY)

    def test_backward_move_rejected(self, store, make_project):
        project = make_project()
        store.set_status(project.id, ProjectStatus.RENDERED)
        with pytest.raises(PipelineInvariantError):
            store.set_status(project.id, ProjectStatus.NARRATION_READY)

    def test_failed_records_error_and_retry_clears_it(self, store, make_project):
        project = make_project()
        store.set_status(project.id, ProjectStatus.PROMPTS_READY)
        store.set_status(project.id, ProjectStatus.FAILED, error="boom")
        assert store.get(project.id).error == "boom"

        store.set_status(project.id, ProjectStatus.PROMPTS_READY)
        resumed = store.get(project.id)
        assert resumed.status is ProjectStatus.PROMPTS_READY
        assert resumed.error is None

    def test_completed_is_final(self, store, make_project):
        project = make_project()
        store.set_status(project.id, ProjectStatus.COMPLETED)
        with pytest.raises(PipelineInvariantError):
            store.set_status(project.id, ProjectStatus.FAILED, error="late")


class TestScenes:

    def test_add_scenes_numbers_from_one(self, store, make_project):
        project = make_project()
        scenes = store.add_scenes(project.id, ["a", "b", "c"])
        assert [s.order for s in scenes] == [1, 2, 3]
        assert len({s.id for s in scenes}) == 3

    def test_add_scenes_only_once(self, store, make_project):
        project = make_project()
        store.add_scenes(project.id, ["a"])
        with pytest.raises(PipelineInvariantError):
            store.add_scenes(project.id, ["b"])

    def test_update_scene_round_trips_nested_values(self, make_project, store, tmp_path):
        project = make_project()
        store.add_scenes(project.id, ["Night falls."])
        store.update_scene(
            project.id,
            1,
            prosody=[ProsodySegment(text="Night falls.", rate="-5%")],
            animation=AnimationPlan(show=ShowAnimation.PAN_LEFT),
        )

        scene = ProjectStore(tmp_path / "project_data").get(project.id).scene_by_order(1)
        assert scene.prosody[0].rate == "-5%"
        assert scene.animation.show is ShowAnimation.PAN_LEFT

    def test_update_scene_cannot_change_order(self, store, make_project):
        project = make_project()
        store.add_scenes(project.id, ["a"])
        with pytest.raises(PipelineInvariantError):
            store.update_scene(project.id, 1, order=5)

    def test_update_unknown_scene(self, store, make_project):
        project = make_project()
        store.add_scenes(project.id, ["a"])
        with pytest.raises(PipelineInvariantError):
            store.update_scene(project.id, 2, narration="b")

    def test_disjoint_updates_both_survive(self, store, make_project):
        project = make_project()
        store.add_scenes(project.id, ["a"])
        store.update_scene(project.id, 1, image_path="/tmp/scene_1.jpg")
        store.update_scene(project.id, 1, audio_path="/tmp/scene_1.mp3", duration_ms=1200)

        scene = store.get(project.id).scene_by_order(1)
        assert scene.image_path == "/tmp/scene_1.jpg"
        assert scene.audio_path == "/tmp/scene_1.mp3"


class TestLogsAndStaleness:

    def test_logs_append_in_order(self, store, make_project):
        project = make_project()
        store.append_log(LogEntry(project.id, LogLevel.INFO, "A", "first"))
        store.append_log(LogEntry(project.id, LogLevel.ERROR, "B", "second", meta={"scene": 2}))

        entries = store.list_logs(project.id)
        assert [e.code for e in entries] == ["A", "B"]
        assert entries[1].meta == {"scene": 2}

    def test_malformed_log_line_skipped(self, store, make_project, tmp_path):
        project = make_project()
        store.append_log(LogEntry(project.id, LogLevel.INFO, "A", "first"))
        with open(tmp_path / "project_data" / project.id / "logs.jsonl", "a", encoding="utf-8") as f:
            f.write("{not json\n")
        assert len(store.list_logs(project.id)) == 1

    def test_find_stale_ignores_terminal_projects(self, store, make_project):
        old = (datetime.now() - timedelta(hours=2)).isoformat()
        stuck = make_project(updated_at=old, status=ProjectStatus.MEDIA_READY)
        make_project(updated_at=old, status=ProjectStatus.COMPLETED)
        make_project()

        stale = store.find_stale(datetime.now() - timedelta(minutes=30))
        assert [p.id for p in stale] == [stuck.id]
