"""
Text provider factory

Creates and caches TextGenerator instances per provider type.
"""

from typing import Dict, Optional

from ...models.entities import TextProviderType
from .base import TextGenerator
from .gemini_provider import GeminiTextGenerator
from .ollama_provider import OllamaTextGenerator

_provider_cache: Dict[TextProviderType, TextGenerator] = {}


def get_default_provider_type() -> TextProviderType:
    """TEXT_PROVIDER wins; otherwise Gemini when a key is configured, else Ollama."""
    from ...config import GEMINI_API_KEYS, TEXT_PROVIDER

    if TEXT_PROVIDER:
        return TextProviderType(TEXT_PROVIDER)
    if GEMINI_API_KEYS:
        return TextProviderType.GEMINI
    return TextProviderType.OLLAMA


def create_text_generator(provider_type: TextProviderType) -> TextGenerator:
    if provider_type is TextProviderType.GEMINI:
        return GeminiTextGenerator()
    return OllamaTextGenerator()


def get_text_generator(provider_type: Optional[TextProviderType] = None) -> TextGenerator:
    provider_type = provider_type or get_default_provider_type()
    if provider_type not in _provider_cache:
        _provider_cache[provider_type] = create_text_generator(provider_type)
    return _provider_cache[provider_type]


def clear_provider_cache() -> None:
    _provider_cache.clear()
