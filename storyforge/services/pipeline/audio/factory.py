"""Speech synthesizer factory keyed on SpeechProviderType."""

from typing import Dict, Optional

from ....models.entities import SpeechProviderType
from .base import SpeechSynthesizer
from .edge_tts_engine import EdgeTTSEngine
from .gemini_tts_engine import GeminiTTSEngine
from .pollinations_tts_engine import PollinationsTTSEngine

_SYNTHESIZERS = {
    SpeechProviderType.EDGE: EdgeTTSEngine,
    SpeechProviderType.GEMINI: GeminiTTSEngine,
    SpeechProviderType.POLLINATIONS: PollinationsTTSEngine,
}

_synthesizer_cache: Dict[SpeechProviderType, SpeechSynthesizer] = {}


def get_speech_synthesizer(provider_type: Optional[SpeechProviderType] = None) -> SpeechSynthesizer:
    if provider_type is None:
        from ....config import SPEECH_PROVIDER
        provider_type = SpeechProviderType(SPEECH_PROVIDER)
    if provider_type not in _synthesizer_cache:
        _synthesizer_cache[provider_type] = _SYNTHESIZERS[provider_type]()
    return _synthesizer_cache[provider_type]


def clear_synthesizer_cache() -> None:
    _synthesizer_cache.clear()
