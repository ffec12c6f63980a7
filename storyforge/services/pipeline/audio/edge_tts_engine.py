"""
Edge TTS Engine - Text-to-Speech using Microsoft Edge voices (free, high quality)

Structured prosody is synthesized one segment at a time with that segment's
rate/volume/pitch; the segment clips are joined with pydub and word
boundaries are shifted by the running duration of the joined audio.
"""

import io
from pathlib import Path
from typing import List, Tuple

import aiohttp
import edge_tts
from edge_tts import exceptions as edge_exceptions
from pydub import AudioSegment

from ....config import HNS_PER_MS
from ....core import FatalProviderError, TransientProviderError, get_logger
from ....models.entities import ProsodySegment, SpeechProviderType, WordBoundary
from .base import (
    SpeechContent,
    SpeechResult,
    SpeechSynthesizer,
    StructuredProsody,
    VoiceInfo,
)

logger = get_logger(__name__, component="edge_tts")

TRANSIENT_EDGE_ERRORS = (
    edge_exceptions.NoAudioReceived,
    edge_exceptions.WebSocketError,
    aiohttp.ClientError,
    TimeoutError,
    ConnectionError,
)


class EdgeTTSEngine(SpeechSynthesizer):
    """Text-to-Speech engine using Microsoft Edge TTS"""

    provider_type = SpeechProviderType.EDGE

    VOICES_BY_LANGUAGE = {
        "en": {
            "name": "English",
            "voices": {
                "en-US-GuyNeural": {"name": "Guy (US)", "gender": "male"},
                "en-US-JennyNeural": {"name": "Jenny (US)", "gender": "female"},
                "en-GB-RyanNeural": {"name": "Ryan (UK)", "gender": "male"},
                "en-GB-SoniaNeural": {"name": "Sonia (UK)", "gender": "female"},
            },
            "default": "en-US-GuyNeural"
        },
        "fr": {
            "name": "French",
            "voices": {
                "fr-FR-HenriNeural": {"name": "Henri (France)", "gender": "male"},
                "fr-FR-DeniseNeural": {"name": "Denise (France)", "gender": "female"},
            },
            "default": "fr-FR-HenriNeural"
        },
        "es": {
            "name": "Spanish",
            "voices": {
                "es-ES-AlvaroNeural": {"name": "Alvaro (Spain)", "gender": "male"},
                "es-MX-DaliaNeural": {"name": "Dalia (Mexico)", "gender": "female"},
            },
            "default": "es-ES-AlvaroNeural"
        },
        "auto": {
            "name": "Multilingual (Auto-detect)",
            "voices": {
                "en-US-EmmaMultilingualNeural": {"name": "Emma (Multilingual)", "gender": "female"},
                "en-US-BrianMultilingualNeural": {"name": "Brian (Multilingual)", "gender": "male"},
            },
            "default": "en-US-EmmaMultilingualNeural"
        }
    }

    DEFAULT_VOICE = "en-US-GuyNeural"

    @property
    def emits_word_boundaries(self) -> bool:
        return True

    @classmethod
    def default_voice_for(cls, language: str) -> str:
        lang_data = cls.VOICES_BY_LANGUAGE.get(language) or cls.VOICES_BY_LANGUAGE["auto"]
        return lang_data["default"]

    async def synthesize(self, content: SpeechContent, voice: str, output_path: str) -> SpeechResult:
        voice = voice or self.DEFAULT_VOICE
        if isinstance(content, StructuredProsody) and content.segments:
            segments = content.segments
        else:
            segments = [ProsodySegment(text=content.text)]

        combined = AudioSegment.empty()
        boundaries: List[WordBoundary] = []

        for segment in segments:
            if not segment.text.strip():
                continue
            audio_bytes, segment_boundaries = await self._stream_segment(segment, voice)
            shift_hns = len(combined) * HNS_PER_MS
            boundaries.extend(
                WordBoundary(text=b.text, offset_hns=b.offset_hns + shift_hns, duration_hns=b.duration_hns)
                for b in segment_boundaries
            )
            combined += AudioSegment.from_file(io.BytesIO(audio_bytes), format="mp3")

        if len(combined) == 0:
            raise TransientProviderError("Edge TTS produced no audio", provider="edge")

        Path(output_path).parent.mkdir(parents=True, exist_ok=True)
        combined.export(output_path, format="mp3", bitrate="192k")

        logger.info(
            f"Edge TTS: generated {len(combined) / 1000:.1f}s audio",
            extra={"voice": voice, "segments": len(segments), "words": len(boundaries)},
        )
        return SpeechResult(path=output_path, duration_ms=len(combined), word_boundaries=boundaries)

    async def _stream_segment(self, segment: ProsodySegment, voice: str) -> Tuple[bytes, List[WordBoundary]]:
        communicate = edge_tts.Communicate(
            segment.text,
            voice,
            rate=segment.rate,
            volume=segment.volume,
            pitch=segment.pitch,
            boundary="WordBoundary",
        )

        audio = bytearray()
        boundaries: List[WordBoundary] = []
        try:
            async for chunk in communicate.stream():
                if chunk["type"] == "audio":
                    audio.extend(chunk["data"])
                elif chunk["type"] == "WordBoundary":
                    boundaries.append(WordBoundary(
                        text=chunk["text"],
                        offset_hns=int(chunk["offset"]),
                        duration_hns=int(chunk["duration"]),
                    ))
        except TRANSIENT_EDGE_ERRORS as exc:
            raise TransientProviderError(f"Edge TTS stream failed: {exc}", provider="edge") from exc
        except ValueError as exc:
            # edge_tts validates voice/rate/volume/pitch formats with ValueError
            raise FatalProviderError(f"Edge TTS rejected request: {exc}", provider="edge") from exc

        if not audio:
            raise TransientProviderError("Edge TTS returned an empty audio stream", provider="edge")
        return bytes(audio), boundaries

    async def list_voices(self) -> List[VoiceInfo]:
        try:
            voices = await edge_tts.list_voices()
        except TRANSIENT_EDGE_ERRORS as exc:
            raise TransientProviderError(f"Could not list Edge voices: {exc}", provider="edge") from exc

        return [
            VoiceInfo(
                id=voice["ShortName"],
                name=voice.get("FriendlyName") or voice["ShortName"],
                gender=str(voice.get("Gender", "")).lower(),
                locale=voice.get("Locale", ""),
                provider=self.provider_type,
            )
            for voice in voices
        ]
