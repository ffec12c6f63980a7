"""
Project use cases - starting a project and (re)triggering its generation.

Keeps routes thin: request validation, creation-mode inference, slug
allocation and background scheduling live here.
"""

import uuid
from typing import Awaitable, Callable, List, Optional

from ...config.constants import (
    DEFAULT_TOPIC,
    MAX_SCENE_COUNT,
    SLUG_MAX_LENGTH,
    TOPIC_MAX_LENGTH,
)
from ...core import (
    ProjectBusyError,
    ProjectNotFoundError,
    ValidationError,
    get_logger,
    unique_slug,
)
from ...models.entities import (
    CreationMode,
    ImageProviderType,
    Project,
    ShowAnimation,
    SpeechProviderType,
)
from ...models.projects import GenerationResponse, StartProjectRequest
from ...models.status import ProjectStatus
from ..infrastructure.logs import ActivityLog, get_log_broadcaster
from ..infrastructure.storage import ProjectStore, get_project_store
from ..pipeline.audio import VoiceInfo, get_speech_synthesizer
from ..pipeline.orchestrator import PipelineOrchestrator, get_orchestrator
from ..pipeline.script import SHOW_ANIMATIONS, TRANSITION_ANIMATIONS
from .base import UseCase

logger = get_logger(__name__, component="project_use_case")

KNOWN_ANIMATIONS = set(SHOW_ANIMATIONS) | set(TRANSITION_ANIMATIONS) | {ShowAnimation.STATIC.value}

Scheduler = Callable[[Callable[[], Awaitable[None]]], None]


def infer_mode(request: StartProjectRequest) -> CreationMode:
    """Explicit mode wins; otherwise narrations > prompt > topic."""
    if request.mode is not None:
        return request.mode
    if request.narrations:
        return CreationMode.NARRATIONS
    if request.prompt and request.prompt.strip():
        return CreationMode.PROMPT
    return CreationMode.TOPIC


def resolve_topic(mode: CreationMode, request: StartProjectRequest) -> str:
    topic = (request.topic or "").strip()
    prompt = (request.prompt or "").strip()

    if mode is CreationMode.NARRATIONS:
        topic = prompt or request.narrations[0].strip()[:TOPIC_MAX_LENGTH]
    elif mode is CreationMode.PROMPT:
        topic = prompt[:TOPIC_MAX_LENGTH]

    return topic or DEFAULT_TOPIC


def validate_request(mode: CreationMode, request: StartProjectRequest) -> None:
    """Raises ValidationError for requests no stage could ever satisfy."""
    if mode is CreationMode.PROMPT and not (request.prompt and request.prompt.strip()):
        raise ValidationError("Prompt mode requires a non-empty prompt")

    if mode is CreationMode.NARRATIONS:
        narrations = request.narrations or []
        if not narrations:
            raise ValidationError("Narrations mode requires at least one narration")
        if len(narrations) > MAX_SCENE_COUNT:
            raise ValidationError(f"At most {MAX_SCENE_COUNT} narrations are supported")
        blank = [i for i, text in enumerate(narrations, start=1) if not text or not text.strip()]
        if blank:
            raise ValidationError(f"Narrations must not be empty (scenes {blank})")

    if not request.language or not request.language.strip():
        raise ValidationError("Language is required")

    unknown = sorted(set(request.allowed_animations) - KNOWN_ANIMATIONS)
    if unknown:
        raise ValidationError(f"Unknown animations: {', '.join(unknown)}")


class StartProjectUseCase(UseCase[StartProjectRequest, Project]):
    def __init__(self, store: Optional[ProjectStore] = None, activity: Optional[ActivityLog] = None):
        self.store = store or get_project_store()
        self.activity = activity or ActivityLog(self.store, get_log_broadcaster())

    async def execute(self, request: StartProjectRequest) -> Project:
        mode = infer_mode(request)
        validate_request(mode, request)

        topic = resolve_topic(mode, request)
        narrations: List[str] = [n.strip() for n in request.narrations or []] if mode is CreationMode.NARRATIONS else []
        scene_count = len(narrations) if narrations else request.scene_count

        speech_provider = request.speech_provider or _default_speech_provider()
        image_provider = request.image_provider or _default_image_provider()
        voice = request.voice or _default_voice(speech_provider, request.language)

        slug = unique_slug(topic, self.store.slug_taken, max_length=SLUG_MAX_LENGTH)
        project = Project(
            id=str(uuid.uuid4()),
            slug=slug,
            mode=mode,
            topic=topic,
            prompt=(request.prompt or "").strip() or None,
            genre=request.genre,
            language=request.language.strip(),
            voice=voice,
            orientation=request.orientation,
            scene_count=scene_count,
            text_provider=request.text_provider,
            speech_provider=speech_provider,
            image_provider=image_provider,
            content_type=request.content_type,
            image_style=request.image_style,
            narrative_tone=request.narrative_tone,
            allowed_animations=list(request.allowed_animations),
        )
        self.store.create(project)
        if narrations:
            self.store.add_scenes(project.id, narrations)

        self.activity.info(
            project.id,
            "PROJECT_STARTED",
            f"Project created with slug: {slug}, mode: {mode.value}",
            slug=slug,
            mode=mode.value,
            scene_count=scene_count,
        )
        return self.store.get(project.id)


class TriggerGenerationUseCase(UseCase[str, GenerationResponse]):
    """Schedule ``advance`` for a project in the background."""

    def __init__(
        self,
        store: Optional[ProjectStore] = None,
        orchestrator: Optional[PipelineOrchestrator] = None,
    ):
        self.store = store or get_project_store()
        self.orchestrator = orchestrator or get_orchestrator()

    async def execute(self, project_id: str, schedule: Optional[Scheduler] = None) -> GenerationResponse:
        """
        Raises:
            ProjectNotFoundError: unknown project
            ProjectBusyError: generation already running in this process
        """
        project = self.store.get(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        if self.orchestrator.is_running(project_id):
            raise ProjectBusyError(project_id)

        async def run_generation() -> None:
            try:
                await self.orchestrator.advance(project_id)
            except ProjectBusyError:
                logger.info("Generation already running", extra={"project_id": project_id})
            except Exception as exc:  # noqa: BLE001
                logger.error(
                    "Background generation crashed",
                    extra={"project_id": project_id, "error": str(exc)},
                    exc_info=True,
                )

        if schedule is None:
            await run_generation()
        else:
            schedule(run_generation)

        message = "Already completed" if project.status is ProjectStatus.COMPLETED else "Generation scheduled"
        return GenerationResponse(project_id=project_id, status=project.status.value, message=message)


async def list_voices(provider: Optional[SpeechProviderType] = None) -> List[VoiceInfo]:
    synthesizer = get_speech_synthesizer(provider)
    return await synthesizer.list_voices()


def _default_speech_provider() -> SpeechProviderType:
    from ...config import SPEECH_PROVIDER
    return SpeechProviderType(SPEECH_PROVIDER)


def _default_image_provider() -> ImageProviderType:
    from ...config import IMAGE_PROVIDER
    return ImageProviderType(IMAGE_PROVIDER)


def _default_voice(provider: SpeechProviderType, language: str) -> str:
    from ..pipeline.audio import EdgeTTSEngine, GeminiTTSEngine, PollinationsTTSEngine

    if provider is SpeechProviderType.GEMINI:
        return GeminiTTSEngine.DEFAULT_VOICE
    if provider is SpeechProviderType.POLLINATIONS:
        return PollinationsTTSEngine.DEFAULT_VOICE
    return EdgeTTSEngine.default_voice_for(language)
