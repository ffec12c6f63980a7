"""
Media coordinator - image and audio branches, joined, then timing

The image branch fans out over a bounded worker pool. The audio branch is
one unit on the global audio queue; inside it scenes are voiced one at a
time in ascending order. Both branches write every finished scene back to
the store immediately, so a failed join keeps whatever already succeeded.
"""

import asyncio
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ...config.constants import PROVIDER_IMAGE_SIZE
from ...core import (
    StageFailedError,
    TransientProviderError,
    get_logger,
    is_readable_image,
    retry_async,
)
from ...models.entities import Project, Scene
from ..infrastructure.logs import ActivityLog
from ..infrastructure.orchestration import AudioQueue, bounded_map
from ..infrastructure.storage import ProjectStore
from .audio import SpeechSynthesizer
from .images import ImageGenerator
from .preconditions import audio_ready, images_ready, missing_orders
from .script.prosody import read_prosody
from .workspace import ProjectWorkspace

logger = get_logger(__name__, component="media")


@dataclass
class MediaSettings:
    image_concurrency: int = 4
    image_max_attempts: int = 3
    image_retry_base_delay: float = 2.0
    tts_max_attempts: int = 3
    tts_retry_base_delay: float = 2.0


class MediaCoordinator:
    def __init__(
        self,
        store: ProjectStore,
        activity: ActivityLog,
        audio_queue: AudioQueue,
        settings: Optional[MediaSettings] = None,
    ):
        self.store = store
        self.activity = activity
        self.audio_queue = audio_queue
        self.settings = settings or MediaSettings()

    async def generate(
        self,
        project: Project,
        image_generator: ImageGenerator,
        synthesizer: SpeechSynthesizer,
        workspace: ProjectWorkspace,
    ) -> None:
        """Fill missing images and audio, then assign contiguous timings.

        Raises:
            StageFailedError: stage ``images`` or ``audio``, naming the scene
        """
        image_orders = list(missing_orders(images_ready(project)))
        audio_orders = list(missing_orders(audio_ready(project)))
        workspace.ensure()

        results = await asyncio.gather(
            self._image_branch(project, image_orders, image_generator, workspace),
            self._audio_branch(project, audio_orders, synthesizer, workspace),
            return_exceptions=True,
        )
        errors = [r for r in results if isinstance(r, BaseException)]
        if errors:
            raise errors[0]

        self.assign_timings(project.id)

    # ---------------------------------------------------------------- images

    async def _image_branch(
        self,
        project: Project,
        orders: Sequence[int],
        generator: ImageGenerator,
        workspace: ProjectWorkspace,
    ) -> None:
        if not orders:
            return
        width, height = PROVIDER_IMAGE_SIZE[project.orientation.value]
        scenes = {s.order: s for s in project.scenes}

        async def worker(order: int) -> str:
            scene = scenes[order]
            path = workspace.image_path(order)

            async def fetch() -> None:
                await generator.generate(scene.image_prompt or scene.narration, path, width, height)
                if not is_readable_image(path):
                    raise TransientProviderError(f"Unreadable image written to {path}", provider=generator.provider_type.value)

            try:
                await retry_async(
                    fetch,
                    attempts=self.settings.image_max_attempts,
                    base_delay=self.settings.image_retry_base_delay,
                    description=f"Image for scene {order}",
                )
            except Exception as exc:
                raise StageFailedError("images", str(exc), scene_order=order) from exc
            self.store.update_scene(project.id, order, image_path=path)
            self.activity.info(project.id, "IMAGE_GENERATED", f"Image ready for scene {order}", scene=order)
            return path

        await bounded_map(orders, worker, self.settings.image_concurrency)

    # ----------------------------------------------------------------- audio

    async def _audio_branch(
        self,
        project: Project,
        orders: Sequence[int],
        synthesizer: SpeechSynthesizer,
        workspace: ProjectWorkspace,
    ) -> None:
        if not orders:
            return
        scenes = [s for s in project.ordered_scenes() if s.order in set(orders)]

        async def voice_all() -> None:
            for scene in scenes:
                await self._voice_scene(project, scene, synthesizer, workspace)

        await self.audio_queue.enqueue(f"project-{project.id}-audio", voice_all)

    async def _voice_scene(
        self,
        project: Project,
        scene: Scene,
        synthesizer: SpeechSynthesizer,
        workspace: ProjectWorkspace,
    ) -> None:
        content = read_prosody(scene.narration, scene.prosody)
        path = workspace.audio_path(scene.order)
        voice = project.voice

        try:
            result = await retry_async(
                lambda: synthesizer.synthesize(content, voice, path),
                attempts=self.settings.tts_max_attempts,
                base_delay=self.settings.tts_retry_base_delay,
                description=f"Speech for scene {scene.order}",
            )
        except Exception as exc:
            raise StageFailedError("audio", str(exc), scene_order=scene.order) from exc

        self.store.update_scene(
            project.id,
            scene.order,
            audio_path=result.path,
            duration_ms=result.duration_ms,
            word_boundaries=list(result.word_boundaries),
        )
        self.activity.info(
            project.id,
            "AUDIO_GENERATED",
            f"Audio ready for scene {scene.order} ({result.duration_ms} ms)",
            scene=scene.order,
            duration_ms=result.duration_ms,
        )

    # ---------------------------------------------------------------- timing

    def assign_timings(self, project_id: str) -> List[Scene]:
        """Walk scenes in order accumulating durations from 0.

        A scene keeps stored timing only when it already sits exactly at the
        cursor with its current duration; anything else is rewritten, which
        also covers scenes whose audio was replaced.
        """
        project = self.store.get(project_id)
        cursor = 0
        updated: List[Scene] = []
        for scene in project.ordered_scenes():
            duration = scene.duration_ms or 0
            start, end = cursor, cursor + duration
            if scene.start_time_ms != start or scene.end_time_ms != end:
                updated.append(self.store.update_scene(project_id, scene.order, start_time_ms=start, end_time_ms=end))
            cursor = end
        if updated:
            logger.info(
                f"Assigned timing to {len(updated)} scenes",
                extra={"project_id": project_id, "total_ms": cursor},
            )
        return updated
