"""
Rendering module - Ken Burns clips and final assembly

Exports:
- SceneRenderer: image + audio + animation plan -> encoded clip
- VideoAssembler: ordered clips -> final video (stream copy)
- build_filter_chain / zoom_trajectory / pan_trajectory: motion math
"""

from .assembler import VideoAssembler
from .kenburns import (
    MOTIONS,
    ClipTiming,
    Motion,
    build_filter_chain,
    clip_timing,
    pan_trajectory,
    zoom_expression,
    zoom_trajectory,
    zoompan_filter,
)
from .renderer import RenderedClip, SceneRenderer

__all__ = [
    "VideoAssembler",
    "MOTIONS",
    "ClipTiming",
    "Motion",
    "build_filter_chain",
    "clip_timing",
    "pan_trajectory",
    "zoom_expression",
    "zoom_trajectory",
    "zoompan_filter",
    "RenderedClip",
    "SceneRenderer",
]
