"""
Gemini text provider

Implementation of TextGenerator for Google's Gemini models via google-genai.
"""

import asyncio
from typing import Any, Callable, Dict, Optional, Sequence

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from ...core import FatalProviderError, TransientProviderError, get_logger
from ...models.entities import TextProviderType
from .base import GenerationConfig, TextGenerator
from .key_pool import ApiKeyPool

logger = get_logger(__name__, component="gemini_text")

FATAL_STATUS_CODES = {400, 401, 403, 404, 429}
# Statuses where another key may still succeed
KEY_REJECTED_STATUS_CODES = {401, 403, 429}


def is_key_rejected(exc: Exception) -> bool:
    return isinstance(exc, genai_errors.APIError) and getattr(exc, "code", None) in KEY_REJECTED_STATUS_CODES


class GeminiClients:
    """Key pool plus one google-genai client per key."""

    def __init__(self, keys: Sequence[str], client_factory: Optional[Callable[[str], Any]] = None):
        self.keys = ApiKeyPool(keys, provider="gemini")
        self._client_factory = client_factory or (lambda key: genai.Client(api_key=key))
        self._clients: Dict[str, Any] = {}

    def __len__(self) -> int:
        return len(self.keys)

    def client_for(self, key: str) -> Any:
        if key not in self._clients:
            self._clients[key] = self._client_factory(key)
        return self._clients[key]

    async def generate_content(self, **kwargs) -> Any:
        """``models.generate_content`` on a worker thread, failing over across keys.

        Raises:
            TransientProviderError / FatalProviderError: mapped API errors
        """

        async def call(key: str) -> Any:
            return await asyncio.to_thread(self.client_for(key).models.generate_content, **kwargs)

        try:
            return await self.keys.call(call, is_key_rejected)
        except Exception as exc:  # noqa: BLE001
            mapped = map_gemini_error(exc)
            if mapped is exc:
                raise
            raise mapped from exc


def map_gemini_error(exc: Exception, provider: str = "gemini") -> Exception:
    """Translate a google-genai or transport error into the provider taxonomy."""
    if isinstance(exc, genai_errors.APIError):
        code = getattr(exc, "code", None)
        if code is not None and code >= 500:
            return TransientProviderError(f"Gemini server error {code}: {exc}", provider=provider)
        if code in FATAL_STATUS_CODES or isinstance(exc, genai_errors.ClientError):
            return FatalProviderError(f"Gemini request rejected ({code}): {exc}", provider=provider)
        return TransientProviderError(f"Gemini error: {exc}", provider=provider)
    if isinstance(exc, (httpx.TransportError, asyncio.TimeoutError, ConnectionError)):
        return TransientProviderError(f"Gemini network error: {exc}", provider=provider)
    return exc


class GeminiTextGenerator(TextGenerator):
    """Google Gemini text provider"""

    provider_type = TextProviderType.GEMINI

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        api_keys: Optional[Sequence[str]] = None,
        client_factory: Optional[Callable[[str], Any]] = None,
    ):
        from ...config import GEMINI_API_KEYS, GEMINI_TEXT_MODEL

        if api_keys is None:
            api_keys = [api_key] if api_key else GEMINI_API_KEYS
        self.clients = GeminiClients(api_keys, client_factory)
        self.model = model or GEMINI_TEXT_MODEL

    def is_available(self) -> bool:
        return len(self.clients) > 0

    def _build_config(self, config: GenerationConfig) -> Any:
        kwargs = {"temperature": config.temperature}
        if config.max_tokens:
            kwargs["max_output_tokens"] = config.max_tokens
        if config.json_output:
            kwargs["response_mime_type"] = "application/json"
        return types.GenerateContentConfig(**kwargs)

    async def generate(self, prompt: str, config: Optional[GenerationConfig] = None) -> str:
        if not self.is_available():
            raise FatalProviderError("Gemini provider is not configured. Set GEMINI_API_KEYS.", provider="gemini")

        config = config or GenerationConfig()
        model = config.model or self.model

        response = await self.clients.generate_content(
            model=model,
            contents=prompt,
            config=self._build_config(config),
        )

        text = getattr(response, "text", None) or ""
        if not text.strip():
            raise TransientProviderError("Gemini returned an empty response", provider="gemini")

        logger.debug("Gemini generation complete", extra={"model": model, "chars": len(text)})
        return text
