"""Text-generation providers behind one TextGenerator interface."""

from .base import GenerationConfig, TextGenerator
from .gemini_provider import GeminiClients, GeminiTextGenerator
from .key_pool import ApiKeyPool
from .ollama_provider import OllamaTextGenerator
from .factory import (
    clear_provider_cache,
    create_text_generator,
    get_default_provider_type,
    get_text_generator,
)

__all__ = [
    "GenerationConfig",
    "TextGenerator",
    "ApiKeyPool",
    "GeminiClients",
    "GeminiTextGenerator",
    "OllamaTextGenerator",
    "clear_provider_cache",
    "create_text_generator",
    "get_default_provider_type",
    "get_text_generator",
]
