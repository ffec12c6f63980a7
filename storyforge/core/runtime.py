"""
Runtime environment helpers and dependency checks.
"""

import os
import shutil
from typing import Iterable, List


REQUIRED_RENDER_TOOLS = ("ffmpeg", "ffprobe")


def parse_bool_env(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def env_int(name: str, default: int, minimum: int = 0) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return max(int(raw), minimum)
    except (TypeError, ValueError):
        return default


def env_float(name: str, default: float, minimum: float = 0.0) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return max(float(raw), minimum)
    except (TypeError, ValueError):
        return default


def missing_runtime_tools(tools: Iterable[str] = REQUIRED_RENDER_TOOLS) -> List[str]:
    return [tool for tool in tools if shutil.which(tool) is None]


def env_list(*values: str | None) -> List[str]:
    """Split the first non-empty comma-separated value, dropping blanks and repeats."""
    for value in values:
        items: List[str] = []
        for part in (value or "").split(","):
            item = part.strip()
            if item and item not in items:
                items.append(item)
        if items:
            return items
    return []
