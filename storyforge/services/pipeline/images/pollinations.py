"""
Pollinations image provider

Downloads a generated image from ``{base}/prompt/{prompt}`` with retry on
network errors and 5xx responses.
"""

from pathlib import Path
from typing import Optional
from urllib.parse import quote

import httpx

from ....core import FatalProviderError, TransientProviderError, get_logger, retry_async
from ....models.entities import ImageProviderType
from .base import ImageGenerator

logger = get_logger(__name__, component="pollinations")


class PollinationsImageGenerator(ImageGenerator):
    provider_type = ImageProviderType.POLLINATIONS

    def __init__(
        self,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        max_attempts: Optional[int] = None,
        retry_base_delay: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        from ....config import (
            IMAGE_MAX_ATTEMPTS,
            IMAGE_TIMEOUT_SECONDS,
            POLLINATIONS_BASE_URL,
            POLLINATIONS_MODEL,
        )

        self.base_url = (base_url or POLLINATIONS_BASE_URL).rstrip("/")
        self.model = model or POLLINATIONS_MODEL
        self.timeout = timeout or IMAGE_TIMEOUT_SECONDS
        self.max_attempts = max_attempts or IMAGE_MAX_ATTEMPTS
        self.retry_base_delay = retry_base_delay
        self._transport = transport

    def build_url(self, prompt: str, width: int, height: int) -> str:
        return (
            f"{self.base_url}/prompt/{quote(prompt, safe='')}"
            f"?width={width}&height={height}&nologo=true&model={self.model}"
        )

    async def generate(self, prompt: str, output_path: str, width: int, height: int) -> str:
        url = self.build_url(prompt, width, height)
        logger.info(f"Generating image for prompt: {prompt[:50]}...")

        content = await retry_async(
            lambda: self._download(url),
            attempts=self.max_attempts,
            base_delay=self.retry_base_delay,
            description="Pollinations image download",
        )

        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        logger.info(f"Image generated successfully: {output_path}")
        return output_path

    async def _download(self, url: str) -> bytes:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport, follow_redirects=True
            ) as client:
                response = await client.get(url)
        except httpx.TransportError as exc:
            raise TransientProviderError(f"Pollinations unreachable: {exc}", provider="pollinations") from exc

        if response.status_code >= 500:
            raise TransientProviderError(
                f"Pollinations server error {response.status_code}", provider="pollinations"
            )
        if response.status_code >= 400:
            raise FatalProviderError(
                f"Pollinations rejected request {response.status_code}", provider="pollinations"
            )
        if not response.content:
            raise TransientProviderError("Pollinations returned an empty body", provider="pollinations")
        return response.content
