"""
Ollama text provider

Implementation of TextGenerator for local models served by Ollama.
"""

from typing import Any, Dict, Optional

import httpx

from ...core import FatalProviderError, TransientProviderError, get_logger
from ...models.entities import TextProviderType
from .base import GenerationConfig, TextGenerator

logger = get_logger(__name__, component="ollama_text")


class OllamaTextGenerator(TextGenerator):
    """Ollama provider for local models (gemma3, llama, mistral, ...)"""

    provider_type = TextProviderType.OLLAMA

    def __init__(
        self,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: float = 300.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize Ollama provider

        Args:
            base_url: Ollama server URL. Defaults to OLLAMA_HOST
            model: Model tag. Defaults to OLLAMA_MODEL
            timeout: Request timeout in seconds (large local models are slow)
            transport: Optional httpx transport, used by tests
        """
        from ...config import OLLAMA_HOST, OLLAMA_MODEL

        self.base_url = (base_url or OLLAMA_HOST).rstrip("/")
        self.model = model or OLLAMA_MODEL
        self.timeout = timeout
        self._transport = transport

    def is_available(self) -> bool:
        try:
            with httpx.Client(timeout=5.0) as client:
                response = client.get(f"{self.base_url}/api/tags")
                return response.status_code == 200
        except httpx.HTTPError:
            return False

    def _build_payload(self, prompt: str, config: GenerationConfig) -> Dict[str, Any]:
        options: Dict[str, Any] = {"temperature": config.temperature}
        if config.max_tokens:
            options["num_predict"] = config.max_tokens
        options.update(config.extra_options)

        payload: Dict[str, Any] = {
            "model": config.model or self.model,
            "prompt": prompt,
            "stream": False,
            "options": options,
        }
        if config.json_output:
            payload["format"] = "json"
        return payload

    async def generate(self, prompt: str, config: Optional[GenerationConfig] = None) -> str:
        config = config or GenerationConfig()
        payload = self._build_payload(prompt, config)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(f"{self.base_url}/api/generate", json=payload)
        except httpx.TransportError as exc:
            raise TransientProviderError(f"Ollama unreachable: {exc}", provider="ollama") from exc

        if response.status_code >= 500:
            raise TransientProviderError(
                f"Ollama server error {response.status_code}: {response.text[:200]}",
                provider="ollama",
            )
        if response.status_code >= 400:
            raise FatalProviderError(
                f"Ollama rejected request {response.status_code}: {response.text[:200]}",
                provider="ollama",
            )

        text = response.json().get("response", "")
        if not text.strip():
            raise TransientProviderError("Ollama returned an empty response", provider="ollama")
        logger.debug("Ollama generation complete", extra={"model": payload["model"], "chars": len(text)})
        return text
