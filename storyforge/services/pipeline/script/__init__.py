"""
Script module - narration text, prosody and animation plans

Exports:
- StoryWriter: metadata, narrations, character sheets, image prompts, animation suggestions
- text_to_prosody_segments / read_prosody: punctuation-based prosody
- AllowedAnimations / coerce_animation_plan: animation enumeration filtering
"""

from .animations import (
    SHOW_ANIMATIONS,
    TRANSITION_ANIMATIONS,
    AllowedAnimations,
    coerce_animation_plan,
)
from .prosody import (
    prosody_for,
    read_prosody,
    split_by_punctuation,
    text_to_prosody_segments,
)
from .writer import StoryMetadata, StoryWriter

__all__ = [
    "SHOW_ANIMATIONS",
    "TRANSITION_ANIMATIONS",
    "AllowedAnimations",
    "coerce_animation_plan",
    "prosody_for",
    "read_prosody",
    "split_by_punctuation",
    "text_to_prosody_segments",
    "StoryMetadata",
    "StoryWriter",
]
