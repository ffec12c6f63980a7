"""
Scene renderer - one still image plus one speech clip into an animated clip
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ....config.constants import RENDER_CANVAS, VIDEO_FPS
from ....core import LogTimer, PipelineInvariantError, RenderError, get_logger, probe_duration_seconds
from ....models.entities import AnimationPlan, Orientation
from .ffmpeg import build_scene_clip_cmd, run_ffmpeg
from .kenburns import build_filter_chain

logger = get_logger(__name__, component="scene_renderer")


@dataclass
class RenderedClip:
    path: str
    duration_ms: int


class SceneRenderer:
    def __init__(self, timeout: float = 900.0, fps: int = VIDEO_FPS):
        self.timeout = timeout
        self.fps = fps

    async def render_scene(
        self,
        image_path: Optional[str],
        audio_path: Optional[str],
        animation: Optional[AnimationPlan],
        orientation: Orientation,
        output_path: str,
    ) -> RenderedClip:
        """Encode one clip whose length is the probed audio duration.

        Raises:
            RenderError: an input is missing or unreadable, or ffmpeg fails
        """
        for label, path in (("image", image_path), ("audio", audio_path)):
            if not path or not Path(path).is_file():
                raise RenderError(f"Missing {label} input: {path}")

        try:
            duration = await probe_duration_seconds(audio_path)
        except PipelineInvariantError as exc:
            raise RenderError(f"Cannot read audio duration: {exc}") from exc

        canvas = RENDER_CANVAS[orientation.value]
        plan = animation or AnimationPlan()
        filter_complex = build_filter_chain(plan, duration, canvas, self.fps)
        cmd = build_scene_clip_cmd(image_path, audio_path, filter_complex, duration, output_path, self.fps)

        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        with LogTimer(logger, f"Render {Path(output_path).name}"):
            await run_ffmpeg(cmd, self.timeout, f"Render {Path(output_path).name}")

        if not Path(output_path).is_file():
            raise RenderError(f"ffmpeg reported success but {output_path} is missing")

        return RenderedClip(path=output_path, duration_ms=int(round(duration * 1000)))
