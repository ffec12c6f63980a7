"""
Tests for storyforge.services.pipeline.orchestrator

End-to-end stage runs with in-memory providers; ffprobe and ffmpeg are
patched so clips and the final video are plain files.
"""

from datetime import datetime, timedelta
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from storyforge.core import ProjectBusyError, ProjectNotFoundError
from storyforge.models.entities import ContentType, CreationMode, LogLevel
from storyforge.models.status import ProjectStatus
from storyforge.services.infrastructure.orchestration import AudioQueue, StuckProjectSweeper
from storyforge.services.pipeline.orchestrator import PipelineOrchestrator, PipelineSettings


def _parse_srt(text):
    cues = []
    for block in text.strip().split("\n\n"):
        lines = block.strip().splitlines()
        start, end = lines[1].split(" --> ")
        cues.append((start, end, " ".join(lines[2:])))
    return cues


@pytest.fixture
def ffmpeg_calls():
    """Patch ffprobe/ffmpeg; records the clip order handed to the concat step."""
    concat_orders = []

    async def fake_run_ffmpeg(cmd, timeout, description):
        if "concat" in cmd:
            list_path = cmd[cmd.index("-i") + 1]
            lines = Path(list_path).read_text(encoding="utf-8").splitlines()
            concat_orders.append([Path(line.split("'")[1]).stem for line in lines])
        Path(cmd[-1]).write_bytes(b"\x00\x00\x00\x18ftypmp42")

    with patch(
        "storyforge.services.pipeline.rendering.renderer.probe_duration_seconds",
        AsyncMock(return_value=1.6),
    ), patch(
        "storyforge.services.pipeline.rendering.renderer.run_ffmpeg",
        side_effect=fake_run_ffmpeg,
    ), patch(
        "storyforge.services.pipeline.rendering.assembler.run_ffmpeg",
        side_effect=fake_run_ffmpeg,
    ):
        yield concat_orders


@pytest.fixture
def make_orchestrator(store, activity, tmp_path, text_generator, image_generator):
    def _make(synthesizer):
        return PipelineOrchestrator(
            store=store,
            activity=activity,
            audio_queue=AudioQueue(),
            settings=PipelineSettings(stage_retry_base_delay=0, tts_retry_base_delay=0, tts_max_attempts=3),
            text_generator_factory=lambda _provider: text_generator,
            synthesizer_factory=lambda _provider: synthesizer,
            image_generator_factory=lambda _provider: image_generator,
            output_dir=tmp_path / "outputs",
        )
    return _make


@pytest.mark.asyncio
class TestPipelineOrchestrator:
    """Stage driving, failure recording and resumption."""

    async def test_word_timed_project_completes(self, make_project, make_orchestrator, synthesizer, ffmpeg_calls):
        """Three scenes with word boundaries give more than three increasing cues."""
        project = make_project()
        orchestrator = make_orchestrator(synthesizer)

        result = await orchestrator.advance(project.id)

        assert result.status is ProjectStatus.COMPLETED
        assert result.error is None
        assert Path(result.video_path).is_file()
        cues = _parse_srt(Path(result.subtitle_path).read_text(encoding="utf-8"))
        assert len(cues) > 3
        starts = [start for start, _, _ in cues]
        assert starts == sorted(starts)
        assert len(set(starts)) == len(starts)

    async def test_completed_project_has_contiguous_order_and_timing(
        self, make_project, make_orchestrator, synthesizer, ffmpeg_calls
    ):
        project = make_project(scene_count=4)
        result = await make_orchestrator(synthesizer).advance(project.id)

        scenes = result.ordered_scenes()
        assert [s.order for s in scenes] == [1, 2, 3, 4]
        assert scenes[0].start_time_ms == 0
        for current, following in zip(scenes, scenes[1:]):
            assert current.end_time_ms == current.start_time_ms + current.duration_ms
            assert following.start_time_ms == current.end_time_ms
        assert ffmpeg_calls == [["scene_1", "scene_2", "scene_3", "scene_4"]]

    async def test_metadata_and_script_persisted(self, make_project, make_orchestrator, synthesizer, ffmpeg_calls):
        project = make_project()
        result = await make_orchestrator(synthesizer).advance(project.id)

        assert result.title == "The Last Lighthouse"
        assert result.character_descriptions and "Mira" in result.character_descriptions
        for scene in result.ordered_scenes():
            assert scene.image_prompt.startswith("A lighthouse at dusk")
            assert len(scene.prosody) == 2
            assert scene.animation.show.value == "zoom-in"

    async def test_audio_failure_marks_project_failed(
        self, make_project, make_orchestrator, store, failing_synthesizer, ffmpeg_calls
    ):
        """Scene 2 failing every attempt fails the project and keeps scene 1's audio."""
        project = make_project()
        synthesizer = failing_synthesizer

        result = await make_orchestrator(synthesizer).advance(project.id)

        assert result.status is ProjectStatus.FAILED
        assert "scene 2" in result.error
        assert synthesizer.calls == [1, 2, 2, 2]
        assert Path(result.scene_by_order(1).audio_path).is_file()
        assert result.scene_by_order(2).audio_path is None

        failures = [e for e in store.list_logs(project.id) if e.code == "GENERATION_FAILED"]
        assert len(failures) == 1
        assert failures[0].level is LogLevel.ERROR
        assert failures[0].meta["stage"] == "audio"
        assert failures[0].meta["scene"] == 2

    async def test_retry_resumes_only_missing_scene(
        self, make_project, make_orchestrator, text_generator, image_generator, failing_synthesizer, ffmpeg_calls
    ):
        """After the provider recovers only scene 2 is voiced again."""
        project = make_project()
        synthesizer = failing_synthesizer
        orchestrator = make_orchestrator(synthesizer)
        await orchestrator.advance(project.id)

        prompts_before = len(text_generator.prompts)
        images_before = list(image_generator.calls)
        synthesizer.failing.clear()
        synthesizer.calls.clear()

        result = await orchestrator.advance(project.id)

        assert result.status is ProjectStatus.COMPLETED
        assert synthesizer.calls == [2]
        assert len(text_generator.prompts) == prompts_before
        assert image_generator.calls == images_before

    async def test_second_advance_makes_no_provider_calls(
        self, make_project, make_orchestrator, synthesizer, text_generator, image_generator, ffmpeg_calls
    ):
        project = make_project()
        orchestrator = make_orchestrator(synthesizer)
        await orchestrator.advance(project.id)
        counts = (len(text_generator.prompts), len(synthesizer.calls), len(image_generator.calls))

        result = await orchestrator.advance(project.id)

        assert result.status is ProjectStatus.COMPLETED
        assert (len(text_generator.prompts), len(synthesizer.calls), len(image_generator.calls)) == counts

    async def test_narrations_mode_skips_narration_generation(
        self, make_project, make_orchestrator, synthesizer, text_generator, store, ffmpeg_calls
    ):
        project = make_project(mode=CreationMode.NARRATIONS, scene_count=2, content_type=ContentType.EDUCATIONAL)
        store.add_scenes(project.id, ["Water boils at one hundred degrees.", "Why does ice float?"])

        result = await make_orchestrator(synthesizer).advance(project.id)

        assert result.status is ProjectStatus.COMPLETED
        assert [s.narration for s in result.ordered_scenes()] == [
            "Water boils at one hundred degrees.",
            "Why does ice float?",
        ]
        assert not any("-scene short video" in p for p in text_generator.prompts)
        assert not any("describe ALL characters" in p for p in text_generator.prompts)

    async def test_placeholder_topic_replaced_by_suggestion(
        self, make_project, make_orchestrator, synthesizer, ffmpeg_calls
    ):
        project = make_project(mode=CreationMode.PROMPT, topic="Untitled Story", prompt="A keeper and a storm")
        result = await make_orchestrator(synthesizer).advance(project.id)
        assert result.topic == "Lighthouse in a storm"

    async def test_missing_video_never_reported_complete(
        self, make_project, make_orchestrator, synthesizer, store, ffmpeg_calls
    ):
        """An assembly step that exits cleanly without writing the file fails the render stage."""
        project = make_project()

        with patch(
            "storyforge.services.pipeline.rendering.assembler.run_ffmpeg",
            AsyncMock(return_value=None),
        ):
            result = await make_orchestrator(synthesizer).advance(project.id)

        assert result.status is ProjectStatus.FAILED
        assert result.subtitle_path is None
        failure = [e for e in store.list_logs(project.id) if e.code == "GENERATION_FAILED"][-1]
        assert failure.meta["stage"] == "render"

    async def test_status_log_records_forward_moves(
        self, make_project, make_orchestrator, synthesizer, store, ffmpeg_calls
    ):
        project = make_project()
        await make_orchestrator(synthesizer).advance(project.id)

        moves = [e.meta["status"] for e in store.list_logs(project.id) if e.code == "STATUS_CHANGED"]
        assert moves == [
            "metadata_ready",
            "narration_ready",
            "prompts_ready",
            "prosody_plan_ready",
            "media_ready",
            "rendered",
            "subtitled",
            "completed",
        ]

    async def test_unknown_project_raises(self, make_orchestrator, synthesizer):
        with pytest.raises(ProjectNotFoundError):
            await make_orchestrator(synthesizer).advance("missing")

    async def test_busy_project_raises(self, make_project, make_orchestrator, synthesizer):
        project = make_project()
        orchestrator = make_orchestrator(synthesizer)
        orchestrator._running.add(project.id)

        with pytest.raises(ProjectBusyError):
            await orchestrator.advance(project.id)
        assert orchestrator.is_running(project.id)

    async def test_run_stops_when_swept_mid_flight(
        self, make_project, make_orchestrator, synthesizer, store, activity, ffmpeg_calls
    ):
        """A project failed by the sweeper while its audio is running stays failed."""
        project = make_project()
        orchestrator = make_orchestrator(synthesizer)
        sweeper = StuckProjectSweeper(store, activity, timeout_minutes=30, is_running=orchestrator.is_running)
        voice_scene = synthesizer.synthesize
        swept = []

        async def synthesize_then_sweep(content, voice, output_path):
            result = await voice_scene(content, voice, output_path)
            if not swept:
                swept.append(sweeper.run_once(now=datetime.now() + timedelta(hours=2)))
            return result

        synthesizer.synthesize = synthesize_then_sweep

        result = await orchestrator.advance(project.id)

        assert swept[0]["marked_failed"] == [project.id]
        assert result.status is ProjectStatus.FAILED
        assert "stuck" in result.error
        assert result.video_path is None
        codes = [e.code for e in store.list_logs(project.id)]
        assert "GENERATION_ABANDONED" in codes
        assert "GENERATION_COMPLETED" not in codes
        assert "GENERATION_FAILED" not in codes
        stuck = [e for e in store.list_logs(project.id) if e.code == "PROCESS_STUCK"][0]
        assert stuck.meta["still_running"] is True

    async def test_fresh_advance_resumes_swept_project(
        self, make_project, make_orchestrator, synthesizer, store, activity, ffmpeg_calls
    ):
        project = make_project()
        orchestrator = make_orchestrator(synthesizer)
        sweeper = StuckProjectSweeper(store, activity, timeout_minutes=30)
        voice_scene = synthesizer.synthesize
        swept = []

        async def synthesize_then_sweep(content, voice, output_path):
            result = await voice_scene(content, voice, output_path)
            if not swept:
                swept.append(sweeper.run_once(now=datetime.now() + timedelta(hours=2)))
            return result

        synthesizer.synthesize = synthesize_then_sweep
        await orchestrator.advance(project.id)
        calls_after_first_run = len(synthesizer.calls)

        result = await orchestrator.advance(project.id)

        assert result.status is ProjectStatus.COMPLETED
        assert result.error is None
        assert len(synthesizer.calls) == calls_after_first_run
