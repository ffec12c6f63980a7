"""
Gemini TTS Engine - Text-to-Speech using Google Gemini 2.5 Flash TTS

Gemini speaks a whole narration in one call and reports no word timing, so
projects voiced with it fall back to scene-timed subtitles. Calls go through
a shared sliding-window limiter to respect the free-tier RPM limit.
"""

import asyncio
import base64
import os
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from google.genai import types
from pydub import AudioSegment

from ....core import FatalProviderError, TransientProviderError, get_logger
from ....models.entities import SpeechProviderType
from ...llm.gemini_provider import GeminiClients
from .base import SpeechContent, SpeechResult, SpeechSynthesizer, VoiceInfo

logger = get_logger(__name__, component="gemini_tts")

# ---------------------------------------------------------------------------
# Gemini TTS voice catalog (voice -> style)
# ---------------------------------------------------------------------------
GEMINI_VOICES = {
    "Zephyr": ("Bright", "female"),
    "Puck": ("Upbeat", "male"),
    "Charon": ("Informative", "male"),
    "Kore": ("Firm", "female"),
    "Fenrir": ("Excitable", "male"),
    "Leda": ("Youthful", "female"),
    "Orus": ("Firm", "male"),
    "Aoede": ("Breezy", "female"),
    "Enceladus": ("Breathy", "male"),
    "Iapetus": ("Clear", "male"),
    "Algieba": ("Smooth", "male"),
    "Despina": ("Smooth", "female"),
    "Algenib": ("Gravelly", "male"),
    "Achernar": ("Soft", "female"),
    "Gacrux": ("Mature", "female"),
    "Achird": ("Friendly", "male"),
    "Vindemiatrix": ("Gentle", "female"),
    "Sulafat": ("Warm", "female"),
}

DEFAULT_GEMINI_VOICE = "Charon"
PCM_SAMPLE_RATE = 24000


class _RateLimiter:
    """Sliding-window limiter: at most ``max_rpm`` acquisitions per 60 seconds."""

    def __init__(self, max_rpm: int = 8):
        self.max_rpm = max_rpm
        self._timestamps: List[float] = []
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        async with self._lock:
            now = time.monotonic()
            self._timestamps = [t for t in self._timestamps if now - t < 60]

            if len(self._timestamps) >= self.max_rpm:
                wait = 60.0 - (now - self._timestamps[0]) + 0.2
                if wait > 0:
                    logger.info(f"Rate limit: waiting {wait:.1f}s ({len(self._timestamps)}/{self.max_rpm} RPM used)")
                    await asyncio.sleep(wait)
                    now = time.monotonic()
                    self._timestamps = [t for t in self._timestamps if now - t < 60]

            self._timestamps.append(time.monotonic())


_rate_limiter = _RateLimiter(max_rpm=int(os.getenv("GEMINI_TTS_RPM", "8")))


def extract_inline_audio(response: Any) -> Tuple[bytes, Optional[str]]:
    """Return the first inline audio payload and its mime type."""
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            inline_data = getattr(part, "inline_data", None)
            if not inline_data:
                continue
            data = getattr(inline_data, "data", None)
            if isinstance(data, str):
                data = base64.b64decode(data)
            if data:
                return data, getattr(inline_data, "mime_type", None)
    raise TransientProviderError("No inline audio found in Gemini response", provider="gemini")


def sample_rate_from_mime(mime_type: Optional[str]) -> int:
    """Read ``rate=`` from a mime like ``audio/L16;codec=pcm;rate=24000``."""
    params: Dict[str, str] = {}
    for part in (mime_type or "").split(";")[1:]:
        if "=" in part:
            key, value = part.split("=", 1)
            params[key.strip().lower()] = value.strip()
    try:
        return int(params.get("rate", PCM_SAMPLE_RATE))
    except ValueError:
        return PCM_SAMPLE_RATE


class GeminiTTSEngine(SpeechSynthesizer):
    """Text-to-Speech engine using Google Gemini TTS"""

    provider_type = SpeechProviderType.GEMINI
    DEFAULT_VOICE = DEFAULT_GEMINI_VOICE

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        api_keys: Optional[Sequence[str]] = None,
        client_factory: Optional[Callable[[str], Any]] = None,
    ):
        from ....config import GEMINI_TTS_API_KEYS, GEMINI_TTS_MODEL

        if api_keys is None:
            api_keys = [api_key] if api_key else GEMINI_TTS_API_KEYS
        self.clients = GeminiClients(api_keys, client_factory)
        self.model = model or GEMINI_TTS_MODEL

    async def synthesize(self, content: SpeechContent, voice: str, output_path: str) -> SpeechResult:
        voice = voice if voice in GEMINI_VOICES else self.DEFAULT_VOICE
        text = content.text
        if not text.strip():
            raise FatalProviderError("Nothing to synthesize", provider="gemini")

        await _rate_limiter.acquire()
        pcm, mime_type = await self._call_gemini_tts(text, voice)

        audio = AudioSegment(data=pcm, sample_width=2, frame_rate=sample_rate_from_mime(mime_type), channels=1)
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        audio.export(output_path, format="mp3", bitrate="192k")

        logger.info(f"Gemini TTS: generated {len(audio) / 1000:.1f}s audio ({len(text)} chars)")
        return SpeechResult(path=output_path, duration_ms=len(audio), word_boundaries=[])

    async def _call_gemini_tts(self, text: str, voice: str) -> Tuple[bytes, Optional[str]]:
        config = types.GenerateContentConfig(
            response_modalities=["AUDIO"],
            speech_config=types.SpeechConfig(
                voice_config=types.VoiceConfig(
                    prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=voice)
                )
            ),
        )
        response = await self.clients.generate_content(model=self.model, contents=text, config=config)

        pcm, mime_type = extract_inline_audio(response)
        # Drop a trailing half frame so pydub accepts the buffer
        usable = len(pcm) - (len(pcm) % 2)
        return pcm[:usable], mime_type

    async def list_voices(self) -> List[VoiceInfo]:
        return [
            VoiceInfo(id=name, name=f"{name} ({style})", gender=gender, locale="multilingual", provider=self.provider_type)
            for name, (style, gender) in GEMINI_VOICES.items()
        ]
