"""
Audio module - speech synthesis engines

Exports:
- SpeechSynthesizer: interface shared by every engine
- EdgeTTSEngine: Microsoft Edge voices with word boundaries
- GeminiTTSEngine: Google Gemini TTS (no word timing)
- PollinationsTTSEngine: Pollinations audio endpoint (no word timing)
"""

from .base import (
    PlainText,
    SpeechContent,
    SpeechResult,
    SpeechSynthesizer,
    StructuredProsody,
    VoiceInfo,
)
from .edge_tts_engine import EdgeTTSEngine
from .gemini_tts_engine import GEMINI_VOICES, GeminiTTSEngine
from .pollinations_tts_engine import POLLINATIONS_VOICES, PollinationsTTSEngine
from .factory import clear_synthesizer_cache, get_speech_synthesizer

__all__ = [
    "PlainText",
    "SpeechContent",
    "SpeechResult",
    "SpeechSynthesizer",
    "StructuredProsody",
    "VoiceInfo",
    "EdgeTTSEngine",
    "GEMINI_VOICES",
    "GeminiTTSEngine",
    "POLLINATIONS_VOICES",
    "PollinationsTTSEngine",
    "clear_synthesizer_cache",
    "get_speech_synthesizer",
]
