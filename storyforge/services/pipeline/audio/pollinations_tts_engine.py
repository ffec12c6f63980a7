"""
Pollinations TTS engine

Fetches an mp3 for the whole narration from ``{base}/{text}?model=...&voice=...``.
The service reports neither duration nor word timing, so the clip length
comes from ffprobe and subtitles fall back to scene timing.
"""

from pathlib import Path
from typing import List, Optional
from urllib.parse import quote

import httpx

from ....core import FatalProviderError, TransientProviderError, get_logger, probe_duration_ms
from ....models.entities import SpeechProviderType
from .base import SpeechContent, SpeechResult, SpeechSynthesizer, VoiceInfo

logger = get_logger(__name__, component="pollinations_tts")

POLLINATIONS_VOICES = {
    "alloy": "Neutral, professional",
    "echo": "Deep, resonant",
    "fable": "Storyteller vibe",
    "onyx": "Warm, rich",
    "nova": "Bright, friendly",
    "shimmer": "Soft, melodic",
}


class PollinationsTTSEngine(SpeechSynthesizer):
    provider_type = SpeechProviderType.POLLINATIONS
    DEFAULT_VOICE = "alloy"

    def __init__(
        self,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        from ....config import (
            POLLINATIONS_TTS_BASE_URL,
            POLLINATIONS_TTS_MODEL,
            POLLINATIONS_TTS_TIMEOUT_SECONDS,
        )

        self.base_url = (base_url or POLLINATIONS_TTS_BASE_URL).rstrip("/")
        self.model = model or POLLINATIONS_TTS_MODEL
        self.timeout = timeout or POLLINATIONS_TTS_TIMEOUT_SECONDS
        self._transport = transport

    def build_url(self, text: str, voice: str) -> str:
        return f"{self.base_url}/{quote(text, safe='')}?model={self.model}&voice={voice}"

    async def synthesize(self, content: SpeechContent, voice: str, output_path: str) -> SpeechResult:
        voice = voice if voice in POLLINATIONS_VOICES else self.DEFAULT_VOICE
        text = content.text
        if not text.strip():
            raise FatalProviderError("Nothing to synthesize", provider="pollinations")

        audio = await self._download(self.build_url(text, voice))
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(audio)

        duration_ms = await probe_duration_ms(output_path)
        logger.info(f"Pollinations TTS: generated {duration_ms / 1000:.1f}s audio ({len(text)} chars)")
        return SpeechResult(path=output_path, duration_ms=duration_ms, word_boundaries=[])

    async def _download(self, url: str) -> bytes:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport, follow_redirects=True
            ) as client:
                response = await client.get(url)
        except httpx.TransportError as exc:
            raise TransientProviderError(f"Pollinations TTS unreachable: {exc}", provider="pollinations") from exc

        if response.status_code >= 500 or response.status_code == 429:
            raise TransientProviderError(
                f"Pollinations TTS server error {response.status_code}", provider="pollinations"
            )
        if response.status_code >= 400:
            raise FatalProviderError(
                f"Pollinations TTS rejected request {response.status_code}", provider="pollinations"
            )
        if not response.content:
            raise TransientProviderError("Pollinations TTS returned an empty body", provider="pollinations")
        return response.content

    async def list_voices(self) -> List[VoiceInfo]:
        return [
            VoiceInfo(id=name, name=f"{name} ({style})", gender="neutral", locale="multilingual", provider=self.provider_type)
            for name, style in POLLINATIONS_VOICES.items()
        ]
