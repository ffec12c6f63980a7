"""
Tests for storyforge.services.use_cases.project_use_case
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from storyforge.core import ProjectBusyError, ProjectNotFoundError, ValidationError
from storyforge.models import StartProjectRequest
from storyforge.models.entities import CreationMode, SpeechProviderType
from storyforge.models.status import ProjectStatus
from storyforge.services.use_cases import (
    StartProjectUseCase,
    TriggerGenerationUseCase,
    infer_mode,
    resolve_topic,
    validate_request,
)


class TestInferMode:

    def test_explicit_mode_wins(self):
        request = StartProjectRequest(mode=CreationMode.TOPIC, prompt="p", narrations=["n"])
        assert infer_mode(request) is CreationMode.TOPIC

    def test_narrations_over_prompt_over_topic(self):
        assert infer_mode(StartProjectRequest(prompt="p", narrations=["n"])) is CreationMode.NARRATIONS
        assert infer_mode(StartProjectRequest(topic="t", prompt="p")) is CreationMode.PROMPT
        assert infer_mode(StartProjectRequest(topic="t", prompt="   ")) is CreationMode.TOPIC
        assert infer_mode(StartProjectRequest()) is CreationMode.TOPIC


class TestResolveTopic:

    def test_topic_mode_keeps_topic(self):
        assert resolve_topic(CreationMode.TOPIC, StartProjectRequest(topic=" Storms ")) == "Storms"

    def test_prompt_mode_truncates_prompt(self):
        request = StartProjectRequest(topic="ignored", prompt="x" * 80)
        assert resolve_topic(CreationMode.PROMPT, request) == "x" * 50

    def test_narrations_mode_uses_first_narration(self):
        request = StartProjectRequest(narrations=["A very first line. " * 5, "Second."])
        assert resolve_topic(CreationMode.NARRATIONS, request) == ("A very first line. " * 5)[:50]

    def test_placeholder_when_nothing_given(self):
        assert resolve_topic(CreationMode.TOPIC, StartProjectRequest()) == "Untitled Story"


class TestValidateRequest:

    def test_prompt_mode_needs_prompt(self):
        with pytest.raises(ValidationError):
            validate_request(CreationMode.PROMPT, StartProjectRequest(mode=CreationMode.PROMPT))

    def test_narrations_must_not_be_blank(self):
        with pytest.raises(ValidationError, match=r"scenes \[2\]"):
            validate_request(CreationMode.NARRATIONS, StartProjectRequest(narrations=["One.", "  "]))

    def test_narrations_mode_needs_narrations(self):
        with pytest.raises(ValidationError):
            validate_request(CreationMode.NARRATIONS, StartProjectRequest(mode=CreationMode.NARRATIONS))

    def test_too_many_narrations(self):
        with pytest.raises(ValidationError):
            validate_request(CreationMode.NARRATIONS, StartProjectRequest(narrations=["a."] * 61))

    def test_language_required(self):
        with pytest.raises(ValidationError):
            validate_request(CreationMode.TOPIC, StartProjectRequest(topic="t", language=" "))

    def test_unknown_animation(self):
        with pytest.raises(ValidationError, match="spin"):
            validate_request(CreationMode.TOPIC, StartProjectRequest(topic="t", allowed_animations=["fade", "spin"]))

    def test_valid_request_passes(self):
        validate_request(CreationMode.TOPIC, StartProjectRequest(topic="t", allowed_animations=["pan-left", "static"]))


@pytest.mark.asyncio
class TestStartProjectUseCase:

    async def test_topic_project_created(self, store, activity):
        request = StartProjectRequest(topic="The Last Lighthouse", scene_count=4, speech_provider=SpeechProviderType.EDGE,
                                      language="fr")

        project = await StartProjectUseCase(store, activity).execute(request)

        assert project.mode is CreationMode.TOPIC
        assert project.slug == "the_last_lighthouse"
        assert project.scene_count == 4
        assert project.scenes == []
        assert project.voice == "fr-FR-HenriNeural"
        assert store.list_logs(project.id)[0].code == "PROJECT_STARTED"

    async def test_narrations_project_gets_scene_rows(self, store, activity):
        request = StartProjectRequest(narrations=[" One. ", "Two."], scene_count=9)

        project = await StartProjectUseCase(store, activity).execute(request)

        assert project.scene_count == 2
        assert [s.narration for s in project.ordered_scenes()] == ["One.", "Two."]

    async def test_slug_collision_gets_date_suffix(self, store, activity):
        use_case = StartProjectUseCase(store, activity)
        first = await use_case.execute(StartProjectRequest(topic="Lighthouse"))
        second = await use_case.execute(StartProjectRequest(topic="Lighthouse"))

        assert first.slug == "lighthouse"
        assert second.slug.startswith("lighthouse_")
        assert second.slug != first.slug

    async def test_gemini_voice_default(self, store, activity):
        request = StartProjectRequest(topic="t", speech_provider=SpeechProviderType.GEMINI)
        project = await StartProjectUseCase(store, activity).execute(request)
        assert project.voice == "Charon"

    async def test_pollinations_voice_default(self, store, activity):
        request = StartProjectRequest(topic="t", speech_provider=SpeechProviderType.POLLINATIONS)
        project = await StartProjectUseCase(store, activity).execute(request)
        assert project.voice == "alloy"

    async def test_invalid_request_creates_nothing(self, store, activity):
        with pytest.raises(ValidationError):
            await StartProjectUseCase(store, activity).execute(StartProjectRequest(mode=CreationMode.PROMPT))
        assert store.list_all() == []


@pytest.mark.asyncio
class TestTriggerGenerationUseCase:

    @pytest.fixture
    def orchestrator(self):
        orchestrator = MagicMock()
        orchestrator.is_running.return_value = False
        orchestrator.advance = AsyncMock()
        return orchestrator

    async def test_schedules_background_run(self, store, make_project, orchestrator):
        project = make_project()
        scheduled = []

        response = await TriggerGenerationUseCase(store, orchestrator).execute(project.id, schedule=scheduled.append)

        assert response.message == "Generation scheduled"
        assert response.status == "created"
        orchestrator.advance.assert_not_awaited()

        await scheduled[0]()
        orchestrator.advance.assert_awaited_once_with(project.id)

    async def test_runs_inline_without_scheduler(self, store, make_project, orchestrator):
        project = make_project()
        await TriggerGenerationUseCase(store, orchestrator).execute(project.id)
        orchestrator.advance.assert_awaited_once_with(project.id)

    async def test_crash_in_background_is_logged_not_raised(self, store, make_project, orchestrator):
        project = make_project()
        orchestrator.advance.side_effect = RuntimeError("boom")
        await TriggerGenerationUseCase(store, orchestrator).execute(project.id)

    async def test_unknown_project(self, store, orchestrator):
        with pytest.raises(ProjectNotFoundError):
            await TriggerGenerationUseCase(store, orchestrator).execute("missing")

    async def test_busy_project(self, store, make_project, orchestrator):
        project = make_project()
        orchestrator.is_running.return_value = True
        with pytest.raises(ProjectBusyError):
            await TriggerGenerationUseCase(store, orchestrator).execute(project.id)

    async def test_completed_project_reports_it(self, store, make_project, orchestrator):
        project = make_project(status=ProjectStatus.COMPLETED)
        response = await TriggerGenerationUseCase(store, orchestrator).execute(project.id, schedule=lambda job: None)
        assert response.message == "Already completed"
