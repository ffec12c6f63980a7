"""
Punctuation-based prosody

A narration is split on terminal punctuation; every piece keeps its
punctuation and gets rate/volume/pitch from how it ends. The prosody stage
stores the segments, and ``read_prosody`` turns whatever is stored into the
content a speech engine takes.
"""

import re
from typing import List, Sequence, Tuple

from ....models.entities import ProsodySegment
from ..audio.base import PlainText, SpeechContent, StructuredProsody

SEGMENT_PATTERN = re.compile(r"([^.!?;:…]+(?:\.{2,}|…|[.!?;:]+(?:\s*[.!?;:]+)*))\s*")

_VERY_EXCITED = re.compile(r"!{2,}$|!\?|\?!")
_ELLIPSIS = re.compile(r"(?:\.{2,}|…)$")

# (rate, volume, pitch)
EXCITED = ("+15%", "+40%", "+15Hz")
EXCLAMATION = ("+10%", "+30%", "+10Hz")
QUESTION = ("+5%", "+10%", "+15Hz")
SUSPENSE = ("-15%", "-10%", "-5Hz")
COLON = ("-5%", "+5%", "+0Hz")
SEMICOLON = ("-5%", "+0%", "+0Hz")
NEUTRAL = ("+0%", "+0%", "+0Hz")


def split_by_punctuation(text: str) -> List[str]:
    """Split ``text`` into punctuation-terminated pieces.

    Trailing text without punctuation becomes its own piece, and text with
    no punctuation at all comes back whole.
    """
    segments: List[str] = []
    last_index = 0
    for match in SEGMENT_PATTERN.finditer(text):
        piece = match.group(1).strip()
        if piece:
            segments.append(piece)
        last_index = match.end()

    remaining = text[last_index:].strip()
    if remaining:
        segments.append(remaining)

    if not segments and text.strip():
        segments.append(text.strip())
    return segments


def prosody_for(text: str) -> Tuple[str, str, str]:
    trimmed = text.strip()
    if _VERY_EXCITED.search(trimmed):
        return EXCITED
    if trimmed.endswith("!"):
        return EXCLAMATION
    if trimmed.endswith("?"):
        return QUESTION
    if _ELLIPSIS.search(trimmed):
        return SUSPENSE
    if trimmed.endswith(":"):
        return COLON
    if trimmed.endswith(";"):
        return SEMICOLON
    return NEUTRAL


def text_to_prosody_segments(narration: str) -> List[ProsodySegment]:
    segments = []
    for piece in split_by_punctuation(narration):
        rate, volume, pitch = prosody_for(piece)
        segments.append(ProsodySegment(text=piece, rate=rate, volume=volume, pitch=pitch))
    return segments


def _normalize(text: str) -> str:
    return " ".join(text.split())


def read_prosody(narration: str, segments: Sequence[ProsodySegment]) -> SpeechContent:
    """Decide once how a scene is spoken.

    Stored segments are used only when they are non-empty and their joined
    text reconstitutes the narration; anything else is spoken as plain text.
    """
    usable = [segment for segment in segments if segment.text and segment.text.strip()]
    if usable and _normalize(" ".join(s.text for s in usable)) == _normalize(narration):
        return StructuredProsody(segments=list(usable))
    return PlainText(text=narration)
