"""Image generation interface."""

from abc import ABC, abstractmethod

from ....models.entities import ImageProviderType


class ImageGenerator(ABC):
    """Abstract base class for still-image providers"""

    provider_type: ImageProviderType

    @abstractmethod
    async def generate(self, prompt: str, output_path: str, width: int, height: int) -> str:
        """Write an image for ``prompt`` to ``output_path`` and return the path

        Raises:
            TransientProviderError: network or server failure after retries
            FatalProviderError: request rejected (auth, quota)
        """
        pass
