"""
Stage executors

A stage pairs a precondition with the work that satisfies it. ``execute``
only touches what the precondition reports missing and persists each result
as soon as it has it.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional

from ...config.constants import DEFAULT_TOPIC
from ...core import PipelineInvariantError, RenderError, StageFailedError, get_logger
from ...models.entities import Project
from ...models.status import ProjectStatus
from ..infrastructure.logs import ActivityLog
from ..infrastructure.storage import ProjectStore
from .audio import SpeechSynthesizer
from .images import ImageGenerator
from .media import MediaCoordinator
from .preconditions import (
    Precondition,
    characters_ready,
    image_prompts_ready,
    media_ready,
    metadata_ready,
    missing_orders,
    narration_ready,
    prosody_ready,
    render_ready,
    subtitle_ready,
)
from .rendering import SceneRenderer, VideoAssembler
from .script import AllowedAnimations, StoryWriter, text_to_prosody_segments
from .subtitles import SubtitleAssembler
from .workspace import ProjectWorkspace

logger = get_logger(__name__, component="stages")


@dataclass
class StageContext:
    """Collaborators for one ``advance`` call on one project."""
    store: ProjectStore
    activity: ActivityLog
    writer: StoryWriter
    synthesizer: SpeechSynthesizer
    image_generator: ImageGenerator
    workspace: ProjectWorkspace
    media: MediaCoordinator
    renderer: SceneRenderer
    assembler: VideoAssembler
    subtitles: SubtitleAssembler
    keep_render_temp: bool = False


class Stage(ABC):
    name: str
    target_status: Optional[ProjectStatus] = None

    @abstractmethod
    def check(self, project: Project) -> Precondition:
        pass

    @abstractmethod
    async def execute(self, project: Project, ctx: StageContext) -> None:
        pass


class MetadataStage(Stage):
    name = "metadata"
    target_status = ProjectStatus.METADATA_READY

    def check(self, project: Project) -> Precondition:
        return metadata_ready(project)

    async def execute(self, project: Project, ctx: StageContext) -> None:
        narrations = [s.narration for s in project.ordered_scenes()]
        metadata = await ctx.writer.generate_metadata(project, narrations)

        changes = {"title": metadata.title, "description": metadata.description, "tags": metadata.tags}
        if project.topic == DEFAULT_TOPIC and metadata.suggested_topic:
            changes["topic"] = metadata.suggested_topic
        ctx.store.update_project(project.id, **changes)
        ctx.activity.info(project.id, "METADATA_GENERATED", f"Title: {metadata.title}")


class NarrationStage(Stage):
    name = "narration"
    target_status = ProjectStatus.NARRATION_READY

    def check(self, project: Project) -> Precondition:
        return narration_ready(project)

    async def execute(self, project: Project, ctx: StageContext) -> None:
        narrations = await ctx.writer.generate_narrations(project)

        if not project.scenes:
            ctx.store.add_scenes(project.id, narrations)
            ctx.activity.info(project.id, "NARRATIONS_GENERATED", f"Created {len(narrations)} scenes")
            return

        if len(project.scenes) != project.scene_count:
            raise PipelineInvariantError(
                f"Project has {len(project.scenes)} scene rows, expected {project.scene_count}"
            )
        filled = []
        for order in missing_orders(self.check(project)):
            ctx.store.update_scene(project.id, order, narration=narrations[order - 1])
            filled.append(order)
        ctx.activity.info(project.id, "NARRATIONS_GENERATED", f"Filled narration for scenes {filled}")


class CharacterStage(Stage):
    name = "characters"

    def check(self, project: Project) -> Precondition:
        return characters_ready(project)

    async def execute(self, project: Project, ctx: StageContext) -> None:
        narrations = [s.narration for s in project.ordered_scenes()]
        descriptions = await ctx.writer.generate_character_descriptions(project, narrations)
        ctx.store.update_project(project.id, character_descriptions=descriptions)
        ctx.activity.info(project.id, "CHARACTERS_GENERATED", "Character descriptions ready")


class ImagePromptStage(Stage):
    name = "image_prompts"
    target_status = ProjectStatus.PROMPTS_READY

    def check(self, project: Project) -> Precondition:
        return image_prompts_ready(project)

    async def execute(self, project: Project, ctx: StageContext) -> None:
        missing = set(missing_orders(self.check(project)))
        ordered = project.ordered_scenes()
        todo = [(s.order, s.narration) for s in ordered if s.order in missing]
        first_missing = min(missing)
        previous = [(s.order, s.image_prompt) for s in ordered if s.order < first_missing and s.image_prompt]

        def persist(batch: Dict[int, str]) -> None:
            for order, text in sorted(batch.items()):
                ctx.store.update_scene(project.id, order, image_prompt=text)

        prompts = await ctx.writer.generate_image_prompts(project, todo, previous, on_batch=persist)
        ctx.activity.info(project.id, "IMAGE_PROMPTS_GENERATED", f"Image prompts ready for {len(prompts)} scenes")


class ProsodyStage(Stage):
    name = "prosody"
    target_status = ProjectStatus.PROSODY_PLAN_READY

    def check(self, project: Project) -> Precondition:
        return prosody_ready(project)

    async def execute(self, project: Project, ctx: StageContext) -> None:
        allowed = AllowedAnimations.from_project(project.allowed_animations)
        missing = set(missing_orders(self.check(project)))
        previous_show: Optional[str] = None

        for scene in project.ordered_scenes():
            if scene.order not in missing:
                previous_show = scene.animation.show.value if scene.animation else previous_show
                continue
            changes = {}
            if not scene.prosody:
                changes["prosody"] = text_to_prosody_segments(scene.narration)
            animation = scene.animation
            if animation is None:
                animation = await ctx.writer.suggest_animation(scene.narration, allowed, previous_show)
                changes["animation"] = animation
            ctx.store.update_scene(project.id, scene.order, **changes)
            previous_show = animation.show.value

        ctx.activity.info(project.id, "PROSODY_PLANNED", f"Prosody and animation planned for {len(missing)} scenes")


class MediaStage(Stage):
    name = "media"
    target_status = ProjectStatus.MEDIA_READY

    def check(self, project: Project) -> Precondition:
        return media_ready(project)

    async def execute(self, project: Project, ctx: StageContext) -> None:
        await ctx.media.generate(project, ctx.image_generator, ctx.synthesizer, ctx.workspace)


class RenderStage(Stage):
    name = "render"
    target_status = ProjectStatus.RENDERED

    def check(self, project: Project) -> Precondition:
        return render_ready(project)

    async def execute(self, project: Project, ctx: StageContext) -> None:
        ctx.workspace.ensure()
        clips: List[str] = []
        for scene in project.ordered_scenes():
            try:
                clip = await ctx.renderer.render_scene(
                    scene.image_path,
                    scene.audio_path,
                    scene.animation,
                    project.orientation,
                    ctx.workspace.clip_path(scene.order),
                )
            except RenderError as exc:
                raise StageFailedError(self.name, str(exc), scene_order=scene.order) from exc
            clips.append(clip.path)

        video_path = await ctx.assembler.concatenate(clips, ctx.workspace.video_path)
        ctx.store.update_project(project.id, video_path=video_path)
        ctx.activity.info(project.id, "VIDEO_RENDERED", f"Rendered {len(clips)} scenes", path=video_path)

        if not ctx.keep_render_temp:
            ctx.workspace.clear_tmp()


class SubtitleStage(Stage):
    name = "subtitle"
    target_status = ProjectStatus.SUBTITLED

    def check(self, project: Project) -> Precondition:
        return subtitle_ready(project)

    async def execute(self, project: Project, ctx: StageContext) -> None:
        path = ctx.subtitles.write(project.ordered_scenes(), ctx.workspace.subtitle_path)
        ctx.store.update_project(project.id, subtitle_path=path)
        ctx.activity.info(project.id, "SUBTITLES_GENERATED", "Subtitle track written", path=path)


def default_stages() -> List[Stage]:
    return [
        MetadataStage(),
        NarrationStage(),
        CharacterStage(),
        ImagePromptStage(),
        ProsodyStage(),
        MediaStage(),
        RenderStage(),
        SubtitleStage(),
    ]
