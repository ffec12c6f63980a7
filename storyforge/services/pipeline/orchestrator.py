"""
Pipeline orchestrator

``advance(project_id)`` walks the fixed stage list. A stage whose
precondition already holds is skipped; otherwise it runs with a bounded
retry on transient provider errors. Any other failure records
``GENERATION_FAILED`` and moves the project to ``failed``, leaving earlier
artifacts in place. Calling ``advance`` again resumes from there.

Only the start of a run may move a project out of ``failed``. If the
project turns ``failed`` while a run is in flight (the stuck-project
sweeper), the run stops at the next stage boundary and leaves it failed.
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Set

from ...core import (
    GenerationAbandonedError,
    LogTimer,
    PipelineInvariantError,
    ProjectBusyError,
    ProjectNotFoundError,
    StageFailedError,
    file_is_present,
    get_logger,
    retry_async,
    set_project_id,
    set_stage,
)
from ...models.entities import Project
from ...models.status import ProjectStatus
from ..infrastructure.logs import ActivityLog, get_log_broadcaster
from ..infrastructure.orchestration import AudioQueue, get_audio_queue
from ..infrastructure.storage import ProjectStore, get_project_store
from ..llm import TextGenerator, get_text_generator
from .audio import SpeechSynthesizer, get_speech_synthesizer
from .images import ImageGenerator, get_image_generator
from .media import MediaCoordinator, MediaSettings
from .preconditions import Pending
from .rendering import SceneRenderer, VideoAssembler
from .script import StoryWriter
from .stages import Stage, StageContext, default_stages
from .subtitles import SubtitleAssembler
from .workspace import ProjectWorkspace

logger = get_logger(__name__, component="orchestrator")


@dataclass
class PipelineSettings:
    image_concurrency: int = 4
    image_prompt_batch_size: int = 5
    image_max_attempts: int = 3
    image_retry_base_delay: float = 2.0
    stage_max_attempts: int = 3
    stage_retry_base_delay: float = 2.0
    tts_max_attempts: int = 3
    tts_retry_base_delay: float = 2.0
    render_timeout: float = 900.0
    keep_render_temp: bool = False

    @classmethod
    def from_config(cls) -> "PipelineSettings":
        from ... import config

        return cls(
            image_concurrency=config.IMAGE_CONCURRENCY,
            image_prompt_batch_size=config.IMAGE_PROMPT_BATCH_SIZE,
            image_max_attempts=config.IMAGE_SCENE_ATTEMPTS,
            image_retry_base_delay=config.IMAGE_RETRY_BASE_DELAY,
            stage_max_attempts=config.STAGE_MAX_ATTEMPTS,
            stage_retry_base_delay=config.STAGE_RETRY_BASE_DELAY,
            tts_max_attempts=config.TTS_MAX_ATTEMPTS,
            tts_retry_base_delay=config.TTS_RETRY_BASE_DELAY,
            render_timeout=config.RENDER_TIMEOUT_SECONDS,
            keep_render_temp=config.KEEP_RENDER_TEMP,
        )


class PipelineOrchestrator:
    def __init__(
        self,
        store: Optional[ProjectStore] = None,
        activity: Optional[ActivityLog] = None,
        audio_queue: Optional[AudioQueue] = None,
        settings: Optional[PipelineSettings] = None,
        text_generator_factory: Callable[..., TextGenerator] = get_text_generator,
        synthesizer_factory: Callable[..., SpeechSynthesizer] = get_speech_synthesizer,
        image_generator_factory: Callable[..., ImageGenerator] = get_image_generator,
        renderer: Optional[SceneRenderer] = None,
        assembler: Optional[VideoAssembler] = None,
        subtitles: Optional[SubtitleAssembler] = None,
        stages: Optional[List[Stage]] = None,
        output_dir=None,
    ):
        self.store = store or get_project_store()
        self.activity = activity or ActivityLog(self.store, get_log_broadcaster())
        self.audio_queue = audio_queue or get_audio_queue()
        self.settings = settings or PipelineSettings.from_config()
        self.text_generator_factory = text_generator_factory
        self.synthesizer_factory = synthesizer_factory
        self.image_generator_factory = image_generator_factory
        self.renderer = renderer or SceneRenderer(timeout=self.settings.render_timeout)
        self.assembler = assembler or VideoAssembler(timeout=self.settings.render_timeout)
        self.subtitles = subtitles or SubtitleAssembler()
        self.stages = stages or default_stages()
        self.output_dir = output_dir
        self.media = MediaCoordinator(
            self.store,
            self.activity,
            self.audio_queue,
            MediaSettings(
                image_concurrency=self.settings.image_concurrency,
                image_max_attempts=self.settings.image_max_attempts,
                image_retry_base_delay=self.settings.image_retry_base_delay,
                tts_max_attempts=self.settings.tts_max_attempts,
                tts_retry_base_delay=self.settings.tts_retry_base_delay,
            ),
        )
        self._running: Set[str] = set()

    def is_running(self, project_id: str) -> bool:
        return project_id in self._running

    def _build_context(self, project: Project) -> StageContext:
        return StageContext(
            store=self.store,
            activity=self.activity,
            writer=StoryWriter(
                self.text_generator_factory(project.text_provider),
                batch_size=self.settings.image_prompt_batch_size,
            ),
            synthesizer=self.synthesizer_factory(project.speech_provider),
            image_generator=self.image_generator_factory(project.image_provider),
            workspace=ProjectWorkspace.for_slug(project.slug, self.output_dir),
            media=self.media,
            renderer=self.renderer,
            assembler=self.assembler,
            subtitles=self.subtitles,
            keep_render_temp=self.settings.keep_render_temp,
        )

    def _require(self, project_id: str) -> Project:
        project = self.store.get(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project

    def _ensure_not_abandoned(self, project_id: str) -> Project:
        project = self._require(project_id)
        if project.status is ProjectStatus.FAILED:
            raise GenerationAbandonedError(project_id, project.error)
        return project

    def _advance_status(self, project_id: str, target: ProjectStatus, resuming: bool = False) -> None:
        project = self._require(project_id) if resuming else self._ensure_not_abandoned(project_id)
        current = project.status
        if current is not ProjectStatus.FAILED and current.rank >= target.rank:
            return
        if self.store.set_status(project_id, target):
            self.activity.info(
                project_id,
                "STATUS_CHANGED",
                f"Status {current.value} -> {target.value}",
                previous=current.value,
                status=target.value,
            )

    async def advance(self, project_id: str) -> Project:
        """Drive a project as far as it can go.

        Returns the project as persisted afterwards: ``completed`` on success,
        ``failed`` with ``error`` set otherwise.

        Raises:
            ProjectNotFoundError: unknown project
            ProjectBusyError: already advancing in this process
        """
        if project_id in self._running:
            raise ProjectBusyError(project_id)
        project = self._require(project_id)
        if project.status is ProjectStatus.COMPLETED:
            return project

        self._running.add(project_id)
        set_project_id(project_id)
        try:
            return await self._run_stages(project_id)
        finally:
            self._running.discard(project_id)
            set_stage(None)

    async def _run_stages(self, project_id: str) -> Project:
        project = self._require(project_id)
        ctx = self._build_context(project)
        self.activity.info(project_id, "GENERATION_STARTED", f"Advancing from {project.status.value}")
        current_stage = None
        resuming = project.status is ProjectStatus.FAILED

        try:
            for stage in self.stages:
                current_stage = stage
                set_stage(stage.name)
                if not resuming:
                    self._ensure_not_abandoned(project_id)
                await self._run_stage(stage, project_id, ctx)
                if stage.target_status is not None:
                    self._advance_status(project_id, stage.target_status, resuming=resuming)
                    resuming = False

            project = self._ensure_not_abandoned(project_id)
            if not (file_is_present(project.video_path) and file_is_present(project.subtitle_path)):
                raise PipelineInvariantError("Final video or subtitle file is missing")
            self._advance_status(project_id, ProjectStatus.COMPLETED)
            self.activity.info(project_id, "GENERATION_COMPLETED", "Video and subtitles ready", path=project.video_path)
        except GenerationAbandonedError as exc:
            self.activity.warning(
                project_id,
                "GENERATION_ABANDONED",
                str(exc),
                stage=current_stage.name if current_stage else None,
            )
        except Exception as exc:  # noqa: BLE001
            self._fail(project_id, current_stage, exc)
        finally:
            self.activity.close(project_id)

        return self._require(project_id)

    async def _run_stage(self, stage: Stage, project_id: str, ctx: StageContext) -> None:
        project = self._require(project_id)
        check = stage.check(project)
        if not isinstance(check, Pending):
            logger.debug(f"Stage {stage.name} already satisfied", extra={"project_id": project_id})
            return

        self.activity.info(
            project_id,
            "STAGE_STARTED",
            f"Running stage {stage.name}",
            stage=stage.name,
            missing=list(check.missing) or None,
        )

        async def attempt() -> None:
            await stage.execute(self._require(project_id), ctx)

        with LogTimer(logger, f"Stage {stage.name}"):
            await retry_async(
                attempt,
                attempts=self.settings.stage_max_attempts,
                base_delay=self.settings.stage_retry_base_delay,
                description=f"Stage {stage.name}",
            )

        after = stage.check(self._require(project_id))
        if isinstance(after, Pending):
            raise StageFailedError(
                stage.name,
                f"output still missing after execution: {after.reason}",
                scene_order=after.missing[0] if after.missing else None,
            )
        self.activity.info(project_id, "STAGE_COMPLETED", f"Stage {stage.name} done", stage=stage.name)

    def _fail(self, project_id: str, stage: Optional[Stage], exc: Exception) -> None:
        stage_name = getattr(exc, "stage", None) or (stage.name if stage else None)
        scene = getattr(exc, "scene_order", None)
        message = str(exc)

        self.activity.error(
            project_id,
            "GENERATION_FAILED",
            message,
            stage=stage_name,
            scene=scene,
            error_type=type(exc).__name__,
        )
        try:
            self.store.set_status(project_id, ProjectStatus.FAILED, error=message)
        except PipelineInvariantError as status_exc:
            logger.error(
                "Could not mark project failed",
                extra={"project_id": project_id, "error": str(status_exc)},
            )


_orchestrator_instance: Optional[PipelineOrchestrator] = None


def get_orchestrator() -> PipelineOrchestrator:
    """Get the shared PipelineOrchestrator instance (singleton pattern)."""
    global _orchestrator_instance
    if _orchestrator_instance is None:
        _orchestrator_instance = PipelineOrchestrator()
    return _orchestrator_instance
