"""
Ken Burns motion math

Every show animation is a linear per-frame recurrence: the zoom moves by a
constant step each output frame and clamps at its target, and pan positions
advance by a constant fraction of the free travel. The ffmpeg ``zoompan``
expressions below and the pure-Python trajectories compute the same values.
"""

import math
from dataclasses import dataclass
from typing import List, Tuple

from ....config.constants import FADE_DURATION, VIDEO_FPS
from ....models.entities import AnimationPlan, ShowAnimation, TransitionAnimation

PAN_ZOOM = 1.05  # overscan that gives pans room to travel


@dataclass(frozen=True)
class Motion:
    """Zoom endpoints plus pan direction per axis (+1 forward, -1 backward, 0 centred)."""
    zoom_start: float
    zoom_end: float
    pan_x: int = 0
    pan_y: int = 0


MOTIONS = {
    ShowAnimation.PAN_LEFT: Motion(PAN_ZOOM, PAN_ZOOM, pan_x=-1),
    ShowAnimation.PAN_RIGHT: Motion(PAN_ZOOM, PAN_ZOOM, pan_x=1),
    ShowAnimation.PAN_UP: Motion(PAN_ZOOM, PAN_ZOOM, pan_y=-1),
    ShowAnimation.PAN_DOWN: Motion(PAN_ZOOM, PAN_ZOOM, pan_y=1),
    ShowAnimation.PAN_DIAGONAL_LEFT: Motion(PAN_ZOOM, PAN_ZOOM, pan_x=-1, pan_y=1),
    ShowAnimation.PAN_DIAGONAL_RIGHT: Motion(PAN_ZOOM, PAN_ZOOM, pan_x=1, pan_y=1),
    ShowAnimation.ZOOM_SLOW: Motion(1.0, 1.04),
    ShowAnimation.ZOOM_IN: Motion(1.0, 1.08),
    ShowAnimation.ZOOM_OUT: Motion(1.1, 1.0),
    ShowAnimation.ZOOM_PAN_LEFT: Motion(1.0, 1.08, pan_x=-1),
    ShowAnimation.ZOOM_PAN_RIGHT: Motion(1.0, 1.08, pan_x=1),
    ShowAnimation.STATIC: Motion(1.0, 1.0),
}


@dataclass(frozen=True)
class ClipTiming:
    duration: float
    fade_in: float
    fade_out: float
    fps: int = VIDEO_FPS

    @property
    def effective_duration(self) -> float:
        return max(self.duration - self.fade_in - self.fade_out, 1.0 / self.fps)

    @property
    def animation_frames(self) -> int:
        """Frames over which the show animation runs; it holds afterwards."""
        return max(1, math.floor(self.effective_duration * self.fps))

    @property
    def total_frames(self) -> int:
        return max(1, math.ceil(self.duration * self.fps))


def clip_timing(plan: AnimationPlan, duration: float, fps: int = VIDEO_FPS) -> ClipTiming:
    """Carve the entrance/exit fades out of ``duration``.

    Zoom entrances and exits render as fades. Very short clips shrink the
    fades so they never overlap.
    """
    fade = min(FADE_DURATION, duration / 2)
    fade_in = fade if plan.entrance is not TransitionAnimation.NONE else 0.0
    fade_out = fade if plan.exit is not TransitionAnimation.NONE else 0.0
    return ClipTiming(duration=duration, fade_in=fade_in, fade_out=fade_out, fps=fps)


def zoom_step(motion: Motion, frames: int) -> float:
    return (motion.zoom_end - motion.zoom_start) / frames


def pan_step(frames: int) -> float:
    return 1.0 / frames


def _num(value: float) -> str:
    return f"{value:.10f}".rstrip("0").rstrip(".") or "0"


def zoom_expression(motion: Motion, frames: int) -> str:
    step = zoom_step(motion, frames)
    if step == 0:
        return _num(motion.zoom_start)
    if step > 0:
        recurrence = f"min(zoom+{_num(step)},{_num(motion.zoom_end)})"
    else:
        recurrence = f"max(zoom-{_num(-step)},{_num(motion.zoom_end)})"
    # zoompan starts from zoom=1, so frame 0 is pinned explicitly
    return f"if(eq(on,0),{_num(motion.zoom_start)},{recurrence})"


def _axis_expression(direction: int, frames: int, size: str) -> str:
    free = f"({size}-{size}/zoom)"
    if direction == 0:
        return f"{size}/2-({size}/zoom/2)"
    progress = f"min(on*{_num(pan_step(frames))},1)"
    if direction > 0:
        return f"{free}*{progress}"
    return f"{free}*(1-{progress})"


def zoompan_filter(show: ShowAnimation, frames: int, canvas: Tuple[int, int], fps: int = VIDEO_FPS) -> str:
    """``zoompan`` emitting one output frame per looped input frame."""
    motion = MOTIONS[show]
    width, height = canvas
    return (
        f"zoompan=z='{zoom_expression(motion, frames)}'"
        f":x='{_axis_expression(motion.pan_x, frames, 'iw')}'"
        f":y='{_axis_expression(motion.pan_y, frames, 'ih')}'"
        f":d=1:s={width}x{height}:fps={fps}"
    )


def build_filter_chain(plan: AnimationPlan, duration: float, canvas: Tuple[int, int], fps: int = VIDEO_FPS) -> str:
    """Full ``-filter_complex`` graph for one scene clip, output label ``[v]``."""
    width, height = canvas
    timing = clip_timing(plan, duration, fps)

    chain = [
        f"[0:v]scale={width}:{height}:force_original_aspect_ratio=increase:flags=lanczos",
        f"crop={width}:{height}",
        "setsar=1",
        "format=yuv420p",
        zoompan_filter(plan.show, timing.animation_frames, canvas, fps),
    ]
    if timing.fade_in > 0:
        chain.append(f"fade=t=in:st=0:d={_num(timing.fade_in)}")
    if timing.fade_out > 0:
        chain.append(f"fade=t=out:st={_num(duration - timing.fade_out)}:d={_num(timing.fade_out)}")
    chain.append("setpts=PTS-STARTPTS[v]")
    return ",".join(chain)


# --------------------------------------------------------------------------
# Pure-Python trajectories (same recurrence as the expressions above)
# --------------------------------------------------------------------------

def zoom_trajectory(show: ShowAnimation, frames: int, total_frames: int) -> List[float]:
    motion = MOTIONS[show]
    step = zoom_step(motion, frames)
    values = [motion.zoom_start]
    for _ in range(1, total_frames):
        previous = values[-1]
        if step > 0:
            values.append(min(previous + step, motion.zoom_end))
        elif step < 0:
            values.append(max(previous + step, motion.zoom_end))
        else:
            values.append(previous)
    return values[:total_frames]


def pan_trajectory(show: ShowAnimation, frames: int, total_frames: int) -> List[Tuple[float, float]]:
    """Pan position per frame as fractions of the free travel on each axis."""
    motion = MOTIONS[show]
    step = pan_step(frames)

    def axis(direction: int, n: int) -> float:
        if direction == 0:
            return 0.5
        progress = min(n * step, 1.0)
        return progress if direction > 0 else 1.0 - progress

    return [(axis(motion.pan_x, n), axis(motion.pan_y, n)) for n in range(total_frames)]
