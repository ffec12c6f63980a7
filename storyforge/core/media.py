"""
Media utilities - probing durations and checking image readability
"""

import asyncio
import subprocess
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from .exceptions import PipelineInvariantError


async def probe_duration_seconds(file_path: str, timeout: float = 30.0) -> float:
    """Get duration of a media file in seconds using ffprobe.

    Never invents a fallback value: timing and clip lengths are derived
    from it.

    Raises:
        PipelineInvariantError: if the file is missing or ffprobe cannot produce a duration
    """
    if not Path(file_path).is_file():
        raise PipelineInvariantError(f"Media file not found: {file_path}")

    cmd = [
        "ffprobe", "-v", "error",
        "-show_entries", "format=duration",
        "-of", "default=noprint_wrappers=1:nokey=1",
        file_path
    ]
    try:
        result = await asyncio.to_thread(
            subprocess.run,
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout
        )
    except subprocess.TimeoutExpired as exc:
        raise PipelineInvariantError(f"ffprobe timed out after {timeout:.0f}s for {file_path}") from exc
    except FileNotFoundError as exc:
        raise PipelineInvariantError("ffprobe not found on PATH") from exc

    if result.returncode != 0:
        raise PipelineInvariantError(
            f"ffprobe failed for {file_path}: {result.stderr.strip()[:300]}"
        )
    try:
        return float(result.stdout.strip())
    except ValueError as exc:
        raise PipelineInvariantError(
            f"ffprobe returned no duration for {file_path}"
        ) from exc


async def probe_duration_ms(file_path: str) -> int:
    return int(round(await probe_duration_seconds(file_path) * 1000))


def is_readable_image(path: Optional[str]) -> bool:
    """Check that ``path`` exists and Pillow can decode its header."""
    if not path or not Path(path).is_file():
        return False
    try:
        with Image.open(path) as img:
            img.verify()
        return True
    except (UnidentifiedImageError, OSError, SyntaxError):
        return False
