"""
Subtitle assembler - SRT track for the final video

The cue granularity is chosen once per project: word-timed when every scene
carries word boundaries, otherwise one cue per scene.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Sequence

from ...config.constants import HNS_PER_MS
from ...core import PipelineInvariantError, get_logger
from ...models.entities import Scene, WordBoundary

logger = get_logger(__name__, component="subtitles")


class SubtitleMode(str, Enum):
    WORD = "word"
    SCENE = "scene"


@dataclass
class SubtitleCue:
    index: int
    start_ms: int
    end_ms: int
    text: str


def format_srt_time(ms: int) -> str:
    """``HH:MM:SS,mmm``"""
    ms = max(0, int(ms))
    total_seconds, millis = divmod(ms, 1000)
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d},{millis:03d}"


def render_srt(cues: Sequence[SubtitleCue]) -> str:
    return "\n".join(
        f"{cue.index}\n{format_srt_time(cue.start_ms)} --> {format_srt_time(cue.end_ms)}\n{cue.text}\n"
        for cue in cues
    )


def choose_mode(scenes: Sequence[Scene]) -> SubtitleMode:
    if scenes and all(scene.word_boundaries for scene in scenes):
        return SubtitleMode.WORD
    return SubtitleMode.SCENE


class SubtitleAssembler:
    def build_cues(self, scenes: Sequence[Scene]) -> List[SubtitleCue]:
        ordered = sorted(scenes, key=lambda s: s.order)
        for scene in ordered:
            if not scene.has_timing:
                raise PipelineInvariantError(f"Scene {scene.order} has no timing")

        if choose_mode(ordered) is SubtitleMode.WORD:
            return self._word_cues(ordered)
        return self._scene_cues(ordered)

    @staticmethod
    def _word_cues(scenes: Sequence[Scene]) -> List[SubtitleCue]:
        shifted: List[WordBoundary] = []
        for scene in scenes:
            shift = scene.start_time_ms * HNS_PER_MS
            shifted.extend(
                WordBoundary(text=b.text, offset_hns=b.offset_hns + shift, duration_hns=b.duration_hns)
                for b in scene.word_boundaries
            )
        shifted.sort(key=lambda b: b.offset_hns)

        return [
            SubtitleCue(
                index=index,
                start_ms=boundary.offset_hns // HNS_PER_MS,
                end_ms=(boundary.offset_hns + boundary.duration_hns) // HNS_PER_MS,
                text=boundary.text,
            )
            for index, boundary in enumerate(shifted, start=1)
        ]

    @staticmethod
    def _scene_cues(scenes: Sequence[Scene]) -> List[SubtitleCue]:
        return [
            SubtitleCue(index=index, start_ms=scene.start_time_ms, end_ms=scene.end_time_ms, text=scene.narration)
            for index, scene in enumerate(scenes, start=1)
        ]

    def write(self, scenes: Sequence[Scene], output_path: str) -> str:
        cues = self.build_cues(scenes)
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(render_srt(cues), encoding="utf-8")
        logger.info(
            f"Wrote {len(cues)} subtitle cues",
            extra={"mode": choose_mode(scenes).value, "path": str(path)},
        )
        return str(path)
