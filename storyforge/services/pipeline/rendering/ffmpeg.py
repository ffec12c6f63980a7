"""
ffmpeg command builders and runner

Commands are built as argument lists so they can be asserted on in tests;
``run_ffmpeg`` executes one off the event loop.
"""

import asyncio
import subprocess
from pathlib import Path
from typing import List, Sequence

from ....config.constants import (
    AUDIO_BITRATE,
    AUDIO_CHANNELS,
    AUDIO_SAMPLE_RATE,
    KEYFRAME_INTERVAL,
    VIDEO_FPS,
)
from ....core import RenderError, get_logger

logger = get_logger(__name__, component="ffmpeg")

STDERR_TAIL = 1000


def encode_options(duration: float, fps: int = VIDEO_FPS) -> List[str]:
    """Constant per-clip encode settings, so clips can be stream-copied together."""
    return [
        "-c:v", "libx264",
        "-preset", "slower",
        "-crf", "18",
        "-profile:v", "high",
        "-tune", "film",
        "-x264-params", f"keyint={KEYFRAME_INTERVAL}:min-keyint={fps}:ref=5",
        "-bf", "3",
        "-r", str(fps),
        "-pix_fmt", "yuv420p",
        "-movflags", "+faststart",
        "-c:a", "aac",
        "-b:a", AUDIO_BITRATE,
        "-ar", str(AUDIO_SAMPLE_RATE),
        "-ac", str(AUDIO_CHANNELS),
        "-t", f"{duration:.3f}",
    ]


def build_scene_clip_cmd(
    image_path: str,
    audio_path: str,
    filter_complex: str,
    duration: float,
    output_path: str,
    fps: int = VIDEO_FPS,
) -> List[str]:
    return [
        "ffmpeg", "-y",
        "-loop", "1",
        "-framerate", str(fps),
        "-i", image_path,
        "-i", audio_path,
        "-filter_complex", filter_complex,
        "-map", "[v]",
        "-map", "1:a",
        *encode_options(duration, fps),
        output_path,
    ]


def write_concat_list(clip_paths: Sequence[str], list_path: Path) -> Path:
    lines = [f"file '{Path(p).resolve()}'" for p in clip_paths]
    list_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return list_path


def build_concat_cmd(list_path: str, output_path: str) -> List[str]:
    return [
        "ffmpeg", "-y",
        "-f", "concat",
        "-safe", "0",
        "-i", list_path,
        "-c", "copy",
        "-movflags", "+faststart",
        output_path,
    ]


async def run_ffmpeg(cmd: List[str], timeout: float, description: str) -> None:
    """Run an ffmpeg command.

    Raises:
        RenderError: non-zero exit, timeout, or missing binary
    """
    logger.debug(f"Running ffmpeg: {description}", extra={"cmd": " ".join(cmd[:6])})
    try:
        result = await asyncio.to_thread(
            subprocess.run,
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout
        )
    except subprocess.TimeoutExpired as exc:
        raise RenderError(f"{description} timed out after {timeout:.0f}s") from exc
    except FileNotFoundError as exc:
        raise RenderError(f"{description} failed: ffmpeg not found") from exc

    if result.returncode != 0:
        stderr = (result.stderr or "")[-STDERR_TAIL:]
        raise RenderError(f"{description} failed (exit {result.returncode})", stderr=stderr)
